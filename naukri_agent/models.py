"""Data models for runs, scraped jobs and their outcomes."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class MatchStatus(str, Enum):
    GOOD = "Good Match"
    POOR = "Poor Match"


class ApplyType(str, Enum):
    DIRECT = "Direct Apply"
    EXTERNAL = "External Apply"
    NO_BUTTON = "No Apply Button"


class ApplicationStatus(str, Enum):
    APPLIED = "Applied"
    SKIPPED = "Skipped"


# Skip reasons reported in the run summary.
SKIP_EXTERNAL = "External Apply"
SKIP_NO_BUTTON = "No Apply Button"
SKIP_POOR_MATCH = "Poor Match"
SKIP_LOAD_FAILED = "Load Failed"
SKIP_APPLY_FAILED = "Apply Failed"


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ── Run configuration ───────────────────────────────────────────────────


@dataclass(frozen=True)
class Credentials:
    email: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class Skill:
    name: str
    display_name: str = ""
    experience: str = ""
    rating: float | None = None
    out_of: int = 10


@dataclass(frozen=True)
class Profile:
    name: str = ""
    location: str = ""
    years_experience: str = ""
    current_ctc: str = ""
    expected_ctc: str = ""
    notice_period: str = ""
    availability: str = ""


@dataclass(frozen=True)
class SearchTarget:
    """Either an explicit listing URL or keywords (+ location)."""

    url: str | None = None
    keywords: str = ""
    location: str = ""
    experience: int | None = None
    mode: str = "search"  # "search" | "recommended"


@dataclass(frozen=True)
class RunConfig:
    credentials: Credentials
    search: SearchTarget = field(default_factory=SearchTarget)
    max_pages: int = 10
    profile: Profile = field(default_factory=Profile)
    skills: tuple[Skill, ...] = ()
    resume_text: str = ""
    user_id: str = "local"


# ── Run output ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class LogEntry:
    message: str
    severity: Severity = Severity.INFO
    timestamp: datetime = field(default_factory=_now)

    def to_dict(self) -> dict[str, str]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "message": self.message,
            "type": self.severity.value,
        }


@dataclass(frozen=True)
class JobListing:
    url: str
    page: int


@dataclass
class JobDetail:
    title: str | None = None
    company: str | None = None
    experience_required: str | None = None
    salary: str | None = None
    location: str | None = None
    posted_date: str | None = None
    openings: str | None = None
    applicants: str | None = None
    key_skills: list[str] = field(default_factory=list)
    company_rating: str | None = None
    highlights: list[str] = field(default_factory=list)
    role: str | None = None
    industry_type: str | None = None
    employment_type: str | None = None
    role_category: str | None = None


@dataclass(frozen=True)
class MatchSignals:
    early_applicant: bool = False
    key_skills: bool = False
    location: bool = False
    experience: bool = False

    def as_tuple(self) -> tuple[bool, bool, bool, bool]:
        return (self.early_applicant, self.key_skills, self.location, self.experience)


@dataclass(frozen=True)
class MatchResult:
    signals: MatchSignals
    score: int
    status: MatchStatus

    TOTAL = 4

    @property
    def can_apply(self) -> bool:
        return self.status is MatchStatus.GOOD


@dataclass
class JobResult:
    user_id: str
    company_url: str
    page_number: int
    ordinal: str
    detail: JobDetail
    match: MatchResult
    apply_type: ApplyType
    application_status: ApplicationStatus = ApplicationStatus.SKIPPED
    skip_reason: str | None = None
    timestamp: datetime = field(default_factory=_now)

    def to_row(self) -> dict[str, Any]:
        """Flat column view shared by the result store and the spreadsheet."""
        d = self.detail
        s = self.match.signals
        return {
            "user_id": self.user_id,
            "datetime": self.timestamp,
            "page_number": self.page_number,
            "job_number": self.ordinal,
            "company_url": self.company_url,
            "early_applicant": s.early_applicant,
            "key_skills_match": s.key_skills,
            "location_match": s.location,
            "experience_match": s.experience,
            "match_score": self.match.score,
            "match_score_total": MatchResult.TOTAL,
            "match_status": self.match.status.value,
            "apply_type": self.apply_type.value,
            "application_status": self.application_status.value,
            "skip_reason": self.skip_reason,
            "job_title": d.title,
            "company_name": d.company,
            "experience_required": d.experience_required,
            "salary": d.salary,
            "location": d.location,
            "posted_date": d.posted_date,
            "openings": d.openings,
            "applicants": d.applicants,
            "key_skills": ", ".join(d.key_skills) or None,
            "role": d.role,
            "industry_type": d.industry_type,
            "employment_type": d.employment_type,
            "role_category": d.role_category,
            "company_rating": d.company_rating,
            "job_highlights": " | ".join(d.highlights) or None,
        }


@dataclass
class RunSummary:
    success: bool
    jobs_applied: int = 0
    jobs_skipped: int = 0
    skip_reasons: dict[str, int] = field(default_factory=dict)
    results: list[JobResult] = field(default_factory=list)
    logs: list[LogEntry] = field(default_factory=list)
    error: str | None = None

    @property
    def total_processed(self) -> int:
        return self.jobs_applied + self.jobs_skipped

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "success": self.success,
            "jobsApplied": self.jobs_applied,
            "jobsSkipped": self.jobs_skipped,
            "skipReasons": dict(self.skip_reasons),
            "totalProcessed": self.total_processed,
            "results": [r.to_row() for r in self.results],
            "logs": [e.to_dict() for e in self.logs],
        }
        if self.error is not None:
            out["error"] = self.error
        return out
