"""Exceptions that are allowed to travel up to the run controller."""
from __future__ import annotations


class AgentError(Exception):
    """Base class for run-level failures."""


class AlreadyRunningError(AgentError):
    def __init__(self) -> None:
        super().__init__("Automation already running")


class ConfigError(AgentError):
    """Missing credentials, unreadable profile, or an unusable search target."""


class LoginFailedError(AgentError):
    pass
