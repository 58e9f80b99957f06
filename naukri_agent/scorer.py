"""Read a job detail page and decide whether it is worth applying to.

Naukri shows a compatibility widget with four ticks (early applicant, key
skills, location, work experience). The decision is a strict AND over the
four: any missing or unticked signal means skip.
"""
from __future__ import annotations

from naukri_agent.browser import Driver
from naukri_agent.locators import Descriptor, resolve
from naukri_agent.log import get_logger
from naukri_agent.models import ApplyType, JobDetail, MatchResult, MatchSignals, MatchStatus
from naukri_agent.sites import SiteProfile

log = get_logger(__name__)


def score_match(signals: MatchSignals | None) -> MatchResult:
    """Pure scoring: score = number of true signals, apply only on 4/4."""
    if signals is None:
        signals = MatchSignals()
    score = sum(1 for flag in signals.as_tuple() if flag)
    status = MatchStatus.GOOD if score == MatchResult.TOTAL else MatchStatus.POOR
    return MatchResult(signals=signals, score=score, status=status)


def read_signals(driver: Driver, site: SiteProfile, timeout_ms: int = 5_000) -> MatchSignals | None:
    """Ticks from the compatibility widget, or ``None`` when there is none."""
    widget = site.match_widget
    if not driver.wait_for(widget.container, timeout_ms):
        return None
    rows = driver.child_texts(f"{widget.container} {widget.block}", [widget.check_icon])
    if not rows:
        return None
    flags = [bool(row) and row[0] is not None for row in rows[: MatchResult.TOTAL]]
    flags += [False] * (MatchResult.TOTAL - len(flags))
    return MatchSignals(*flags)


def scrape_detail(driver: Driver, site: SiteProfile) -> JobDetail:
    detail = JobDetail()
    for f in site.detail_fields:
        value = driver.texts(f.selector) if f.many else driver.text(f.selector)
        setattr(detail, f.name, value if value else ([] if f.many else None))

    stats = driver.child_texts(site.stats.block, [site.stats.value])
    for name, row in zip(site.stats.fields, stats):
        setattr(detail, name, row[0] if row and row[0] else None)

    labeled = site.labeled
    for row in driver.child_texts(labeled.block, [labeled.label, *labeled.values]):
        if not row or not row[0]:
            continue
        label = row[0].rstrip(":").strip()
        attr = labeled.fields.get(label)
        value = next((v for v in row[1:] if v), None)
        if attr and value:
            setattr(detail, attr, value)
    return detail


def detect_apply_type(driver: Driver, site: SiteProfile) -> tuple[ApplyType, Descriptor | None]:
    """External takes precedence; the returned descriptor is the direct button."""
    if resolve(driver, site.external_apply_button, interactable=False) is not None:
        return ApplyType.EXTERNAL, None
    button = resolve(driver, site.apply_button, interactable=False)
    if button is not None:
        return ApplyType.DIRECT, button
    return ApplyType.NO_BUTTON, None
