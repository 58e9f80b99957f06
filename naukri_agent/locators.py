"""
Ranked element descriptors and the cascading resolver.

A descriptor is one way of finding an element (known id, attribute
substring, input type, visible text, ARIA role). Site tables list them from
most specific to most generic; :func:`resolve` walks the list and returns
the first one that currently matches something usable, so a markup change on
the site degrades to a generic fallback instead of a failure.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from naukri_agent.browser import Driver
from naukri_agent.log import get_logger

log = get_logger(__name__)


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


@dataclass(frozen=True)
class Descriptor:
    def selector(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.selector()


@dataclass(frozen=True)
class ById(Descriptor):
    element_id: str

    def selector(self) -> str:
        return f"#{self.element_id}"


@dataclass(frozen=True)
class ByCss(Descriptor):
    css: str

    def selector(self) -> str:
        return self.css


@dataclass(frozen=True)
class ByAttr(Descriptor):
    """``tag[attr*="value" i]``; exact match when ``contains`` is False."""

    attr: str
    value: str
    tag: str = "input"
    contains: bool = True
    ignore_case: bool = True

    def selector(self) -> str:
        op = "*=" if self.contains else "="
        flag = " i" if self.ignore_case else ""
        return f'{self.tag}[{self.attr}{op}"{_quote(self.value)}"{flag}]'


@dataclass(frozen=True)
class ByPlaceholder(ByAttr):
    attr: str = "placeholder"
    value: str = ""


@dataclass(frozen=True)
class ByType(Descriptor):
    input_type: str
    within: str = ""

    def selector(self) -> str:
        base = f'input[type="{_quote(self.input_type)}"]'
        return f"{self.within} {base}" if self.within else base


@dataclass(frozen=True)
class ByText(Descriptor):
    text: str
    tag: str = "button"

    def selector(self) -> str:
        return f'{self.tag}:has-text("{_quote(self.text)}")'


@dataclass(frozen=True)
class ByRole(Descriptor):
    role: str
    name: str = ""

    def selector(self) -> str:
        if self.name:
            return f'role={self.role}[name="{_quote(self.name)}"]'
        return f"role={self.role}"


def placeholder(value: str) -> ByPlaceholder:
    return ByPlaceholder(value=value)


def css(*selectors: str) -> list[Descriptor]:
    return [ByCss(s) for s in selectors]


# ── Resolution ──────────────────────────────────────────────────────────


def _usable(driver: Driver, sel: str, interactable: bool) -> bool:
    if driver.count(sel) < 1:
        return False
    if not interactable:
        return True
    return driver.is_visible(sel) and driver.is_enabled(sel)


def resolve(
    driver: Driver,
    descriptors: Sequence[Descriptor],
    *,
    interactable: bool = True,
) -> Descriptor | None:
    """First descriptor whose target exists (and is visible + enabled).

    Never raises: a probe that blows up counts as a miss and the next
    candidate is tried.
    """
    for desc in descriptors:
        sel = desc.selector()
        try:
            if _usable(driver, sel, interactable):
                log.debug("Resolved %s", sel)
                return desc
        except Exception as exc:
            log.debug("Probe %s failed: %s", sel, exc)
    return None


def dedupe(urls: Iterable[str]) -> list[str]:
    """Exact-URL de-duplication that keeps first-seen order."""
    return list(dict.fromkeys(u for u in urls if u))


def collect_links(
    driver: Driver,
    descriptors: Sequence[Descriptor],
    *,
    must_contain: str = "",
) -> tuple[Descriptor | None, list[str]]:
    """Hrefs from the first descriptor that yields any matching link."""
    for desc in descriptors:
        try:
            hrefs = driver.hrefs(desc.selector())
        except Exception as exc:
            log.debug("Link probe %s failed: %s", desc, exc)
            continue
        links = [h for h in hrefs if isinstance(h, str) and must_contain in h]
        if links:
            return desc, dedupe(links)
    return None, []
