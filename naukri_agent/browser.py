"""
Browser driver boundary.

Everything the engine does to a page goes through :class:`BrowserSession`, a
thin wrapper over Playwright's sync API. Methods are forgiving where the
engine probes (``count``, ``is_visible``, ``text``…) and raise where the
engine acts (``goto``, ``click``, ``fill``) so the caller decides whether a
failure is a skip, a retry or fatal.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Protocol

from naukri_agent.log import get_logger

log = get_logger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

LAUNCH_ARGS: list[str] = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-first-run",
    "--disable-features=IsolateOrigins,site-per-process",
    "--disable-blink-features=AutomationControlled",
]

# Runs before any page script: hides the usual headless/automation tells.
STEALTH_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => false });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
window.chrome = { runtime: {} };
const _query = window.navigator.permissions && window.navigator.permissions.query;
if (_query) {
  window.navigator.permissions.query = (p) => (
    p.name === 'notifications'
      ? Promise.resolve({ state: Notification.permission })
      : _query(p)
  );
}
"""

_SCROLL_SCRIPT = """
([step, pause]) => new Promise((resolve) => {
  let total = 0;
  const timer = setInterval(() => {
    window.scrollBy(0, step);
    total += step;
    if (total >= document.body.scrollHeight - window.innerHeight) {
      clearInterval(timer);
      resolve();
    }
  }, pause);
})
"""

# label[for=id] first, then the surrounding container's own text.
_OPTION_LABELS_SCRIPT = """
(inputs) => inputs.map((input) => {
  let label = '';
  if (input.id) {
    const el = document.querySelector(`label[for="${input.id}"]`);
    if (el) label = el.innerText.trim();
  }
  if (!label) {
    const parent = input.parentElement;
    if (parent) {
      label = Array.from(parent.childNodes)
        .filter((n) => n.nodeType === Node.TEXT_NODE
          || (n.nodeType === Node.ELEMENT_NODE && n.tagName !== 'INPUT'))
        .map((n) => n.textContent)
        .join(' ')
        .trim();
    }
  }
  return label || input.value || '';
})
"""

_CHILD_TEXTS_SCRIPT = """
(nodes, children) => nodes.map((node) => children.map((sel) => {
  const el = node.querySelector(sel);
  return el ? (el.innerText || '').trim() : null;
}))
"""


class Driver(Protocol):
    """What the engine needs from a browser page."""

    @property
    def url(self) -> str: ...

    def goto(self, url: str, timeout_ms: int) -> None: ...

    def reload(self, timeout_ms: int) -> None: ...

    def wait_for(self, selector: str, timeout_ms: int) -> bool: ...

    def count(self, selector: str) -> int: ...

    def is_visible(self, selector: str) -> bool: ...

    def is_enabled(self, selector: str) -> bool: ...

    def click(self, selector: str, nth: int = 0) -> None: ...

    def fill(self, selector: str, text: str) -> None: ...

    def press(self, key: str, selector: str | None = None) -> None: ...

    def text(self, selector: str) -> str | None: ...

    def texts(self, selector: str) -> list[str]: ...

    def hrefs(self, selector: str) -> list[str]: ...

    def attributes(self, selector: str, name: str) -> list[str | None]: ...

    def option_labels(self, selector: str) -> list[str]: ...

    def child_texts(self, selector: str, children: list[str]) -> list[list[str | None]]: ...

    def body_text_length(self) -> int: ...

    def scroll_to_bottom(self) -> None: ...

    def screenshot(self, path: str) -> None: ...

    def close(self) -> None: ...


class BrowserSession:
    """One Playwright browser + context + page; closed exactly once."""

    def __init__(self, playwright: Any, browser: Any, context: Any, page: Any) -> None:
        self._pw = playwright
        self._browser = browser
        self._context = context
        self.page = page
        self._closed = False

    @classmethod
    def launch(cls, *, headless: bool = True, default_timeout_ms: int = 20_000) -> "BrowserSession":
        _pw_path = os.environ.get("PLAYWRIGHT_BROWSERS_PATH", "")
        if _pw_path and not Path(_pw_path).exists():
            os.environ.pop("PLAYWRIGHT_BROWSERS_PATH", None)
        from playwright.sync_api import sync_playwright

        pw = sync_playwright().start()
        try:
            browser = pw.chromium.launch(headless=headless, args=LAUNCH_ARGS)
            context = browser.new_context(
                viewport={"width": 1920, "height": 1080},
                user_agent=USER_AGENT,
                locale="en-US",
                ignore_https_errors=True,
            )
            context.add_init_script(STEALTH_SCRIPT)
            page = context.new_page()
            page.set_default_timeout(default_timeout_ms)
        except Exception:
            pw.stop()
            raise
        log.info("Browser launched (headless=%s)", headless)
        return cls(pw, browser, context, page)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def url(self) -> str:
        return self.page.url

    # ── navigation ──────────────────────────────────────────────────────

    def goto(self, url: str, timeout_ms: int) -> None:
        self.page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)

    def reload(self, timeout_ms: int) -> None:
        self.page.reload(wait_until="domcontentloaded", timeout=timeout_ms)

    def wait_for(self, selector: str, timeout_ms: int) -> bool:
        try:
            self.page.wait_for_selector(selector, state="attached", timeout=timeout_ms)
            return True
        except Exception:
            return False

    # ── probes (never raise) ────────────────────────────────────────────

    def count(self, selector: str) -> int:
        try:
            return self.page.locator(selector).count()
        except Exception:
            return 0

    def is_visible(self, selector: str) -> bool:
        try:
            return self.page.locator(selector).first.is_visible()
        except Exception:
            return False

    def is_enabled(self, selector: str) -> bool:
        try:
            return self.page.locator(selector).first.is_enabled()
        except Exception:
            return False

    def text(self, selector: str) -> str | None:
        try:
            loc = self.page.locator(selector)
            if loc.count() == 0:
                return None
            return loc.first.inner_text().strip()
        except Exception:
            return None

    def texts(self, selector: str) -> list[str]:
        try:
            return [t.strip() for t in self.page.locator(selector).all_inner_texts() if t.strip()]
        except Exception:
            return []

    def hrefs(self, selector: str) -> list[str]:
        try:
            return self.page.locator(selector).evaluate_all("els => els.map(a => a.href)")
        except Exception:
            return []

    def attributes(self, selector: str, name: str) -> list[str | None]:
        try:
            return self.page.locator(selector).evaluate_all(
                "(els, name) => els.map(e => e.getAttribute(name))", name
            )
        except Exception:
            return []

    def option_labels(self, selector: str) -> list[str]:
        try:
            return self.page.locator(selector).evaluate_all(_OPTION_LABELS_SCRIPT)
        except Exception:
            return []

    def child_texts(self, selector: str, children: list[str]) -> list[list[str | None]]:
        try:
            return self.page.locator(selector).evaluate_all(_CHILD_TEXTS_SCRIPT, children)
        except Exception:
            return []

    def body_text_length(self) -> int:
        try:
            return int(self.page.evaluate("() => document.body ? document.body.innerText.length : 0"))
        except Exception:
            return 0

    # ── actions (raise on failure) ──────────────────────────────────────

    def click(self, selector: str, nth: int = 0) -> None:
        self.page.locator(selector).nth(nth).click()

    def fill(self, selector: str, text: str) -> None:
        self.page.locator(selector).first.fill(text)

    def press(self, key: str, selector: str | None = None) -> None:
        if selector:
            self.page.locator(selector).first.press(key)
        else:
            self.page.keyboard.press(key)

    def scroll_to_bottom(self, step: int = 400, pause_ms: int = 300) -> None:
        self.page.evaluate(_SCROLL_SCRIPT, [step, pause_ms])

    def screenshot(self, path: str) -> None:
        self.page.screenshot(path=path, full_page=True)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for closer in (self._context.close, self._browser.close, self._pw.stop):
            try:
                closer()
            except Exception as exc:
                log.debug("Ignoring error during browser shutdown: %s", exc)
        log.info("Browser closed")
