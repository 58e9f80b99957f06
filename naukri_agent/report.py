"""Markdown summary of a finished run."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from naukri_agent.log import get_logger
from naukri_agent.models import ApplicationStatus, JobResult, RunSummary

log = get_logger(__name__)

_TROUBLESHOOTING: dict[str, str] = {
    "External Apply": "Apply on the company site using the links below",
    "No Apply Button": "The listing may have expired or requires a recruiter login",
    "Poor Match": "Update key skills, location or experience on your profile to raise the match",
    "Load Failed": "The portal was slow; re-run later or lower `max_pages`",
    "Apply Failed": "The Apply button did not respond; check `data/` for a screenshot",
}


def _clip(text: str | None, width: int) -> str:
    text = (text or "").replace("|", "/").strip()
    return text[:width] + ("…" if len(text) > width else "")


def _job_line(r: JobResult) -> str:
    d = r.detail
    title = _clip(d.title or "Unknown role", 40)
    company = _clip(d.company or "Unknown", 22)
    return f"| {r.ordinal} | {title} | {company} | {r.match.score}/4 | [Open]({r.company_url}) |"


def build_run_report(summary: RunSummary, *, started_at: datetime | None = None) -> str:
    date = (started_at or datetime.now(timezone.utc)).strftime("%Y-%m-%d %H:%M")
    outcome = "completed" if summary.success else "stopped early"
    lines: list[str] = [f"# Naukri Run Report — {date}", ""]
    lines.append(
        f"Run {outcome}: **{summary.total_processed}** processed | "
        f"**{summary.jobs_applied}** applied | **{summary.jobs_skipped}** skipped"
    )
    lines.append("")
    if summary.error:
        lines.append(f"> Error: {summary.error}")
        lines.append("")

    if summary.skip_reasons:
        lines.append("## Skip Reasons")
        lines.append("")
        lines.append("| Reason | Count |")
        lines.append("|--------|------:|")
        for reason, count in sorted(summary.skip_reasons.items(), key=lambda kv: -kv[1]):
            lines.append(f"| {reason} | {count} |")
        lines.append("")

    applied = [r for r in summary.results if r.application_status is ApplicationStatus.APPLIED]
    if applied:
        lines.append("## Applied")
        lines.append("")
        lines.append("| # | Role | Company | Match | Link |")
        lines.append("|--:|------|---------|------:|------|")
        lines.extend(_job_line(r) for r in applied)
        lines.append("")

    external = [r for r in summary.results if r.skip_reason == "External Apply"]
    if external:
        lines.append("## Apply Manually")
        lines.append("")
        for r in external:
            lines.append(f"- **{_clip(r.detail.title, 60) or 'Unknown role'}** @ {r.detail.company or 'Unknown'} [Open]({r.company_url})")
        lines.append("")

    hints = [f"- **{reason}:** {_TROUBLESHOOTING[reason]}" for reason in summary.skip_reasons if reason in _TROUBLESHOOTING]
    if hints:
        lines.append("---")
        lines.append("")
        lines.append("## Troubleshooting")
        lines.append("")
        lines.extend(hints)
        lines.append("")

    log.debug("Built run report: %d applied, %d skipped", summary.jobs_applied, summary.jobs_skipped)
    return "\n".join(lines)


def write_run_report(content: str, directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    path = directory / f"run_{stamp}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Report written → %s", path)
    return path
