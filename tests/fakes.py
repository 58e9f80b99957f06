"""Scripted in-memory browser that satisfies the ``Driver`` protocol.

Each URL owns a tiny DOM: a mapping from selector string to the elements it
matches. Comma-separated selectors match the union of their parts, which is
enough to mimic the CSS lists the site table uses.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable


@dataclass
class El:
    text: str = ""
    href: str | None = None
    attrs: dict[str, str] = field(default_factory=dict)
    label: str | None = None
    children: dict[str, str | None] = field(default_factory=dict)
    visible: bool = True
    enabled: bool = True


Dom = dict[str, list[El]]
ClickHandler = Callable[["FakeDriver", int], None]


class FakeDriver:
    def __init__(self, pages: dict[str, Dom] | None = None, *, start_url: str = "about:blank") -> None:
        self.pages: dict[str, Dom] = pages or {}
        self._url = start_url
        self.on_click: dict[str, ClickHandler] = {}
        self.redirects: dict[str, str] = {}
        self.fail_goto: dict[str, int] = {}  # url -> remaining failures (-1 = forever)
        self.body_length: dict[str, int] = {}
        self.visits: list[str] = []
        self.clicks: list[tuple[str, str, int]] = []
        self.fills: list[tuple[str, str]] = []
        self.presses: list[tuple[str, str | None]] = []
        self.screenshots: list[str] = []
        self.scrolls = 0
        self.reloads = 0
        self.close_calls = 0
        self.probe_errors: set[str] = set()

    # ── helpers for tests ───────────────────────────────────────────────

    @property
    def dom(self) -> Dom:
        return self.pages.setdefault(self._url, {})

    def set(self, selector: str, *elements: El, url: str | None = None) -> None:
        dom = self.pages.setdefault(url or self._url, {})
        dom[selector] = list(elements)

    def remove(self, selector: str) -> None:
        self.dom.pop(selector, None)

    def _find(self, selector: str) -> list[El]:
        if selector in self.probe_errors:
            raise RuntimeError(f"probe exploded: {selector}")
        dom = self.dom
        if selector in dom:
            return dom[selector]
        if "," in selector:
            found: list[El] = []
            for part in selector.split(","):
                found.extend(dom.get(part.strip(), []))
            return found
        return []

    # ── Driver protocol ─────────────────────────────────────────────────

    @property
    def url(self) -> str:
        return self._url

    def goto(self, url: str, timeout_ms: int) -> None:
        self.visits.append(url)
        remaining = self.fail_goto.get(url, 0)
        if remaining:
            if remaining > 0:
                self.fail_goto[url] = remaining - 1
            raise TimeoutError(f"Timeout {timeout_ms}ms exceeded navigating to {url}")
        self._url = self.redirects.get(url, url)

    def reload(self, timeout_ms: int) -> None:
        self.reloads += 1

    def wait_for(self, selector: str, timeout_ms: int) -> bool:
        return self.count(selector) > 0

    def count(self, selector: str) -> int:
        return len(self._find(selector))

    def is_visible(self, selector: str) -> bool:
        els = self._find(selector)
        return bool(els) and els[0].visible

    def is_enabled(self, selector: str) -> bool:
        els = self._find(selector)
        return bool(els) and els[0].enabled

    def click(self, selector: str, nth: int = 0) -> None:
        els = self._find(selector)
        if nth >= len(els):
            raise RuntimeError(f"No element {selector}[{nth}] to click")
        self.clicks.append((self._url, selector, nth))
        handler = self.on_click.get(selector)
        if handler is not None:
            handler(self, nth)

    def fill(self, selector: str, text: str) -> None:
        if not self._find(selector):
            raise RuntimeError(f"No element {selector} to fill")
        self.fills.append((selector, text))

    def press(self, key: str, selector: str | None = None) -> None:
        self.presses.append((key, selector))

    def text(self, selector: str) -> str | None:
        els = self._find(selector)
        return els[0].text.strip() if els else None

    def texts(self, selector: str) -> list[str]:
        return [e.text.strip() for e in self._find(selector) if e.text.strip()]

    def hrefs(self, selector: str) -> list[str]:
        return [e.href for e in self._find(selector) if e.href]

    def attributes(self, selector: str, name: str) -> list[str | None]:
        return [e.attrs.get(name) for e in self._find(selector)]

    def option_labels(self, selector: str) -> list[str]:
        return [e.label if e.label is not None else e.text for e in self._find(selector)]

    def child_texts(self, selector: str, children: list[str]) -> list[list[str | None]]:
        return [[e.children.get(c) for c in children] for e in self._find(selector)]

    def body_text_length(self) -> int:
        return self.body_length.get(self._url, 2000)

    def scroll_to_bottom(self) -> None:
        self.scrolls += 1

    def screenshot(self, path: str) -> None:
        self.screenshots.append(path)

    def close(self) -> None:
        self.close_calls += 1


# ── page builders for the Naukri site table ─────────────────────────────


def login_page(driver: FakeDriver, site, *, succeed: bool = True, error_text: str | None = None) -> None:
    url = site.login_url
    driver.set("#usernameField", El(), url=url)
    driver.set("#passwordField", El(), url=url)
    driver.set("button[type='submit'].blue-btn", El("Login"), url=url)

    def _submit(d: FakeDriver, _nth: int) -> None:
        if error_text:
            d.set(".errorMsg", El(error_text))
        elif succeed:
            d._url = site.home_url

    driver.on_click["button[type='submit'].blue-btn"] = _submit


def listing_page(driver: FakeDriver, url: str, links: list[str]) -> None:
    driver.set("a.title", *[El(f"Job {i}", href=h) for i, h in enumerate(links, 1)], url=url)


def job_page(
    driver: FakeDriver,
    site,
    url: str,
    *,
    title: str = "Python Developer",
    company: str = "Acme",
    ticks: tuple[bool, ...] | None = (True, True, True, True),
    apply: str | None = "direct",
) -> None:
    driver.set("h1[class*='jd-header-title']", El(title), url=url)
    driver.set("[class*='jd-header-comp-name'] > a", El(company), url=url)
    driver.set("[class*='styles_chip'] span", El("Python"), El("SQL"), url=url)
    if ticks is not None:
        mw = site.match_widget
        driver.set(mw.container, El(), url=url)
        driver.set(
            f"{mw.container} {mw.block}",
            *[El(children={mw.check_icon: "" if t else None}) for t in ticks],
            url=url,
        )
    if apply == "direct":
        driver.set("#apply-button", El("Apply"), url=url)
    elif apply == "external":
        driver.set("#company-site-button", El("Apply on company site"), url=url)


def messages(state) -> list[str]:
    return [e.message for e in state.logs]
