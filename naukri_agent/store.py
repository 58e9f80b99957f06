"""Persist per-job outcomes, one row per (user, job URL)."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Sequence

from sqlalchemy import Boolean, DateTime, Integer, String, Text, UniqueConstraint, create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from naukri_agent.log import get_logger
from naukri_agent.models import JobResult
from naukri_agent.retry import RetryPolicy, retry

log = get_logger(__name__)


class Base(DeclarativeBase):
    pass


class JobApplicationResult(Base):
    __tablename__ = "job_application_results"
    __table_args__ = (
        UniqueConstraint("user_id", "company_url", name="uq_user_company_url"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        "datetime", DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    page_number: Mapped[int] = mapped_column(Integer, default=0)
    job_number: Mapped[str] = mapped_column(String(32), default="")
    company_url: Mapped[str] = mapped_column(String(2048), nullable=False)

    early_applicant: Mapped[bool] = mapped_column(Boolean, default=False)
    key_skills_match: Mapped[bool] = mapped_column(Boolean, default=False)
    location_match: Mapped[bool] = mapped_column(Boolean, default=False)
    experience_match: Mapped[bool] = mapped_column(Boolean, default=False)
    match_score: Mapped[int] = mapped_column(Integer, default=0)
    match_score_total: Mapped[int] = mapped_column(Integer, default=4)
    match_status: Mapped[str] = mapped_column(String(32), default="")
    apply_type: Mapped[str] = mapped_column(String(32), default="")
    application_status: Mapped[str] = mapped_column(String(16), default="")
    skip_reason: Mapped[str | None] = mapped_column(String(64), nullable=True)

    job_title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    company_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    experience_required: Mapped[str | None] = mapped_column(String(100), nullable=True)
    salary: Mapped[str | None] = mapped_column(String(100), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    posted_date: Mapped[str | None] = mapped_column(String(50), nullable=True)
    openings: Mapped[str | None] = mapped_column(String(50), nullable=True)
    applicants: Mapped[str | None] = mapped_column(String(50), nullable=True)
    key_skills: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str | None] = mapped_column(String(255), nullable=True)
    industry_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    employment_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role_category: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company_rating: Mapped[str | None] = mapped_column(String(20), nullable=True)
    job_highlights: Mapped[str | None] = mapped_column(Text, nullable=True)


@dataclass(frozen=True)
class SaveReport:
    inserted: int
    duplicates: int


class ResultStore:
    """Insert-or-ignore storage for :class:`JobResult` batches."""

    def __init__(self, url_or_engine: str | Engine) -> None:
        if isinstance(url_or_engine, Engine):
            self.engine = url_or_engine
        else:
            self.engine = create_engine(url_or_engine, echo=False)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)

    # A concurrent writer can slip a row in between the existence check and
    # the insert; the retry sees it on the next pass and skips it.
    @retry(RetryPolicy(max_attempts=3, backoff=(0.5, 1.0)), retryable=(IntegrityError, OperationalError))
    def save_results(self, results: Sequence[JobResult]) -> SaveReport:
        """Insert every result whose (user, URL) is not stored yet."""
        rows: dict[tuple[str, str], dict[str, Any]] = {}
        for result in results:
            row = result.to_row()
            row["created_at"] = row.pop("datetime")
            rows.setdefault((row["user_id"], row["company_url"]), row)
        batch_dupes = len(results) - len(rows)
        if not rows:
            return SaveReport(inserted=0, duplicates=batch_dupes)

        with self.Session.begin() as session:
            existing: set[tuple[str, str]] = set()
            for user_id in {k[0] for k in rows}:
                urls = [k[1] for k in rows if k[0] == user_id]
                stmt = select(JobApplicationResult.company_url).where(
                    JobApplicationResult.user_id == user_id,
                    JobApplicationResult.company_url.in_(urls),
                )
                existing.update((user_id, url) for url in session.scalars(stmt))
            fresh = [row for key, row in rows.items() if key not in existing]
            session.add_all(JobApplicationResult(**row) for row in fresh)

        report = SaveReport(inserted=len(fresh), duplicates=batch_dupes + len(existing))
        log.info("Saved %d result(s), ignored %d duplicate(s)", report.inserted, report.duplicates)
        return report

    def count(self, user_id: str | None = None) -> int:
        stmt = select(func.count()).select_from(JobApplicationResult)
        if user_id is not None:
            stmt = stmt.where(JobApplicationResult.user_id == user_id)
        with self.Session() as session:
            return session.scalar(stmt) or 0

    def fetch(self, user_id: str) -> list[JobApplicationResult]:
        stmt = (
            select(JobApplicationResult)
            .where(JobApplicationResult.user_id == user_id)
            .order_by(JobApplicationResult.id)
        )
        with self.Session() as session:
            return list(session.scalars(stmt))

    def dispose(self) -> None:
        self.engine.dispose()
