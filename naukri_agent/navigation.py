"""Page loads with bounded retries and post-load content checks."""
from __future__ import annotations

import time

from naukri_agent.browser import Driver
from naukri_agent.events import RunState
from naukri_agent.log import get_logger
from naukri_agent.retry import RetryPolicy, Sleep, Timeouts

log = get_logger(__name__)

# Below this much body text a "loaded" page is treated as blank.
MIN_BODY_TEXT = 500


class PageNotReady(Exception):
    pass


def auto_scroll(driver: Driver, state: RunState | None = None) -> None:
    """One scroll-to-bottom pass to wake lazy-loaded content; best effort."""
    try:
        driver.scroll_to_bottom()
    except Exception as exc:
        log.debug("Scroll failed: %s", exc)
        if state is not None:
            state.warning(f"Scrolling failed: {exc}")


def _recover(driver: Driver, timeouts: Timeouts) -> None:
    """Reload whatever is on screen before the next attempt; best effort."""
    try:
        driver.reload(timeouts.reload_ms)
    except Exception as exc:
        log.debug("Reload before retry failed: %s", exc)


def _check_markers(
    driver: Driver,
    markers: tuple[str, str],
    state: RunState,
    timeouts: Timeouts,
    sleep: Sleep,
) -> None:
    results, no_results = markers
    if driver.wait_for(f"{results}, {no_results}", timeouts.marker_ms):
        return
    state.warning("Page loaded but job elements not found. Verifying page content...")
    if driver.body_text_length() < MIN_BODY_TEXT:
        raise PageNotReady("Page appears empty")
    auto_scroll(driver, state)
    sleep(timeouts.page_render)
    if driver.count(results) or driver.count(no_results):
        return
    raise PageNotReady("Expected results markers never appeared")


def safe_load(
    driver: Driver,
    url: str,
    state: RunState,
    *,
    markers: tuple[str, str] | None = None,
    policy: RetryPolicy = RetryPolicy(),
    timeouts: Timeouts = Timeouts(),
    sleep: Sleep = time.sleep,
) -> bool:
    """Load ``url``; ``False`` (never an exception) once ``policy`` is spent.

    ``markers`` is a ``(results, no_results)`` pair for search pages: the
    load only counts when one of them shows up.
    """
    for attempt in policy.attempts():
        if attempt > 1:
            state.warning(f"Retrying page load (attempt {attempt}/{policy.max_attempts})")
            sleep(policy.delay_before(attempt))
            _recover(driver, timeouts)
        try:
            driver.goto(url, timeouts.navigation_ms)
            sleep(timeouts.page_render)
            if markers is not None:
                _check_markers(driver, markers, state, timeouts, sleep)
            return True
        except Exception as exc:
            state.warning(f"Page load attempt {attempt} error: {exc}")

    state.error(f"Unable to load page after {policy.max_attempts} attempts: {url}")
    return False
