"""Load the YAML profile and environment into a :class:`RunConfig`."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from naukri_agent.errors import ConfigError
from naukri_agent.log import get_logger
from naukri_agent.models import Credentials, Profile, RunConfig, SearchTarget, Skill
from naukri_agent.resume import load_resume_text, years_from_text

log = get_logger(__name__)

load_dotenv()

ROOT: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT / "config"
PROFILE_PATH: Path = Path(os.environ.get("NAUKRI_PROFILE", "") or CONFIG_DIR / "profile.yaml")
DATA_DIR: Path = ROOT / "data"
REPORTS_DIR: Path = ROOT / "reports"
DB_URL: str = os.environ.get("DB_URL", "").strip() or f"sqlite:///{DATA_DIR / 'results.db'}"

SEARCH_MODES = ("search", "recommended")


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def env_flag(key: str, default: bool = True) -> bool:
    raw = get_env(key)
    if not raw:
        return default
    return raw.lower() not in ("0", "false", "no", "off")


def ensure_dirs() -> None:
    for d in (DATA_DIR, REPORTS_DIR):
        d.mkdir(parents=True, exist_ok=True)


def load_profile(path: Path | None = None) -> dict[str, Any]:
    path = path or PROFILE_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as exc:
        raise ConfigError(f"Profile not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Profile {path.name} is not valid YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Profile {path.name} must be a mapping, got {type(data).__name__}")
    return data


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _profile(raw: Mapping[str, Any], resume_text: str) -> Profile:
    years = _text(raw.get("years_experience"))
    if (not years or years == "0") and resume_text:
        found = years_from_text(resume_text)
        if found:
            log.info("Using %s years of experience from resume", found)
            years = found
    return Profile(
        name=_text(raw.get("name")),
        location=_text(raw.get("location")),
        years_experience=years,
        current_ctc=_text(raw.get("current_ctc")),
        expected_ctc=_text(raw.get("expected_ctc")),
        notice_period=_text(raw.get("notice_period")),
        availability=_text(raw.get("availability")),
    )


def _skill(raw: Any) -> Skill:
    if isinstance(raw, str):
        return Skill(name=raw.strip())
    if not isinstance(raw, Mapping) or not _text(raw.get("name")):
        raise ConfigError(f"Skill entries need a name: {raw!r}")
    rating = raw.get("rating")
    try:
        rating = float(rating) if rating not in (None, "") else None
        out_of = int(raw.get("out_of") or 10)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Bad rating for skill {raw.get('name')!r}: {exc}") from exc
    return Skill(
        name=_text(raw.get("name")),
        display_name=_text(raw.get("display_name")),
        experience=_text(raw.get("experience")),
        rating=rating,
        out_of=out_of,
    )


def _search(raw: Mapping[str, Any]) -> SearchTarget:
    mode = _text(raw.get("mode")) or "search"
    if mode not in SEARCH_MODES:
        raise ConfigError(f"search.mode must be one of {SEARCH_MODES}, got {mode!r}")
    experience = raw.get("experience")
    try:
        experience = int(experience) if experience not in (None, "") else None
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"search.experience must be a whole number: {exc}") from exc
    return SearchTarget(
        url=_text(raw.get("url")) or None,
        keywords=_text(raw.get("keywords")),
        location=_text(raw.get("location")),
        experience=experience,
        mode=mode,
    )


def build_run_config(
    data: Mapping[str, Any],
    *,
    email: str | None = None,
    password: str | None = None,
    max_pages: int | None = None,
    resume_text: str | None = None,
) -> RunConfig:
    """Validate a profile mapping plus credentials into a :class:`RunConfig`.

    Credentials fall back to ``NAUKRI_EMAIL`` / ``NAUKRI_PASSWORD``. Resume
    text, when not passed in, is read from ``resume_path``.
    """
    email = (email or get_env("NAUKRI_EMAIL")).strip()
    password = password or get_env("NAUKRI_PASSWORD")
    if not email or not password:
        raise ConfigError("Naukri credentials missing: set NAUKRI_EMAIL and NAUKRI_PASSWORD")

    if resume_text is None:
        resume_text = load_resume_text(data.get("resume_path"))

    pages = max_pages if max_pages is not None else data.get("max_pages", 10)
    try:
        pages = int(pages)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"max_pages must be a whole number: {exc}") from exc
    if pages < 1:
        raise ConfigError("max_pages must be at least 1")

    return RunConfig(
        credentials=Credentials(email=email, password=password),
        search=_search(data.get("search") or {}),
        max_pages=pages,
        profile=_profile(data.get("profile") or {}, resume_text),
        skills=tuple(_skill(s) for s in data.get("skills") or ()),
        resume_text=resume_text,
        user_id=_text(data.get("user_id")) or "local",
    )


def load_run_config(path: Path | None = None, **overrides: Any) -> RunConfig:
    return build_run_config(load_profile(path), **overrides)
