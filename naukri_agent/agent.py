"""
Naukri auto-apply agent.

Runs: launch browser → login → crawl listing pages → per job: scrape, score,
apply + answer chatbot (or skip) → store + export + report.

One run at a time per :class:`RunController`. ``stop()`` only raises a flag;
the run notices it at the next checkpoint (before each page, before each job
and right after a job page loads) and winds down through the normal exit
path, which is also the only place the browser gets closed.
"""
from __future__ import annotations

import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from naukri_agent.answers import AnswerEngine
from naukri_agent.browser import BrowserSession, Driver
from naukri_agent.chatbot import ChatbotFiller
from naukri_agent.config import DATA_DIR, DB_URL, REPORTS_DIR, env_flag
from naukri_agent.crawler import ListingCrawler
from naukri_agent.errors import AgentError, AlreadyRunningError, ConfigError, LoginFailedError
from naukri_agent.events import EventBus, ProgressSink, RunState
from naukri_agent.export import EXPORT_NAME, export_results
from naukri_agent.log import get_logger
from naukri_agent.models import (
    SKIP_APPLY_FAILED,
    SKIP_EXTERNAL,
    SKIP_LOAD_FAILED,
    SKIP_NO_BUTTON,
    SKIP_POOR_MATCH,
    ApplicationStatus,
    ApplyType,
    JobDetail,
    JobListing,
    JobResult,
    LogEntry,
    RunConfig,
    RunSummary,
)
from naukri_agent.report import build_run_report, write_run_report
from naukri_agent.retry import PollPolicy, RetryPolicy, Sleep, Timeouts
from naukri_agent.scorer import detect_apply_type, read_signals, score_match, scrape_detail
from naukri_agent.session import SessionController
from naukri_agent.sites import SiteProfile, get_site
from naukri_agent.store import ResultStore

log = get_logger(__name__)

SessionFactory = Callable[[], Driver]


def default_session_factory() -> Driver:
    return BrowserSession.launch(headless=env_flag("RUN_HEADLESS", True))


class RunController:
    def __init__(
        self,
        *,
        session_factory: SessionFactory = default_session_factory,
        site: SiteProfile | None = None,
        store: ResultStore | None = None,
        db_url: str = DB_URL,
        timeouts: Timeouts = Timeouts(),
        policy: RetryPolicy = RetryPolicy(),
        poll: PollPolicy = PollPolicy(),
        sleep: Sleep = time.sleep,
        data_dir: Path = DATA_DIR,
        reports_dir: Path | None = REPORTS_DIR,
        bus: EventBus | None = None,
        max_job_failures: int = 3,
    ) -> None:
        self.session_factory = session_factory
        self.site = site or get_site("naukri")
        self._store_instance = store
        self.db_url = db_url
        self.timeouts = timeouts
        self.policy = policy
        self.poll = poll
        self.sleep = sleep
        self.data_dir = data_dir
        self.reports_dir = reports_dir
        self.bus = bus or EventBus()
        # consecutive unexplained job failures before the session is presumed dead
        self.max_job_failures = max_job_failures

        self._guard = threading.Lock()
        self.state: RunState | None = None
        self.last_summary: RunSummary | None = None
        self.last_report: Path | None = None

    # ── public API ──────────────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self._guard.locked()

    def subscribe(self, sink: ProgressSink) -> Callable[[], None]:
        return self.bus.subscribe(sink)

    def run(self, config: RunConfig) -> RunSummary:
        """Execute one run; raises :class:`AlreadyRunningError` if one is active."""
        if not self._guard.acquire(blocking=False):
            raise AlreadyRunningError()
        try:
            return self._run(config)
        finally:
            self._guard.release()

    def start(self, config: RunConfig) -> RunSummary:
        """Like :meth:`run` but a concurrent call gets a rejection summary."""
        try:
            return self.run(config)
        except AlreadyRunningError as exc:
            log.warning("Start rejected: %s", exc)
            return RunSummary(success=False, error=str(exc))

    def stop(self) -> bool:
        """Ask the active run to wind down; ``False`` when nothing is running."""
        state = self.state
        if state is None or not self.is_running:
            return False
        if not state.stop_requested:
            state.request_stop()
            state.warning("Stop requested, finishing current step...")
        return True

    def logs(self) -> list[LogEntry]:
        state = self.state
        if state is not None:
            return list(state.logs)
        return list(self.last_summary.logs) if self.last_summary else []

    def reset(self) -> bool:
        """Recovery hook: drop leftover state and release a dangling session.

        Refused while a run holds the guard; that run owns its session and
        closes it on its own thread. Use :meth:`stop` instead.
        """
        if self.is_running:
            log.warning("Reset refused: a run is in progress, use stop() instead")
            return False
        state, self.state = self.state, None
        if state is not None:
            state.request_stop()
            self._release(state)
        log.warning("Run controller state reset")
        return True

    # ── run ─────────────────────────────────────────────────────────────

    def _run(self, config: RunConfig) -> RunSummary:
        state = RunState(self.bus)
        self.state = state
        started_at = datetime.now(timezone.utc)
        success, error = False, None
        state.info("Starting Naukri automation...")
        try:
            self._execute(config, state)
            success = True
        except AgentError as exc:
            error = str(exc)
            state.error(f"Automation failed: {error}")
            self._screenshot(state)
        except Exception as exc:
            error = str(exc) or exc.__class__.__name__
            log.exception("Unexpected failure during run")
            state.error(f"Automation failed: {error}")
            self._screenshot(state)
        finally:
            try:
                self._persist(state)
                if success:
                    self._log_totals(state)
            finally:
                self._release(state)

        summary = state.summary(success, error)
        self.last_summary = summary
        if self.reports_dir is not None:
            try:
                self.last_report = write_run_report(
                    build_run_report(summary, started_at=started_at), self.reports_dir
                )
            except OSError as exc:
                log.warning("Could not write run report: %s", exc)
        self.state = None
        return summary

    def _execute(self, config: RunConfig, state: RunState) -> None:
        creds = config.credentials
        if not creds.email or not creds.password:
            raise ConfigError("Naukri email and password are required")

        state.info("Launching browser...")
        driver = self.session_factory()
        state.session = driver

        session = SessionController(
            driver, self.site, state, timeouts=self.timeouts, policy=self.policy, sleep=self.sleep
        )
        if not session.login(creds):
            raise LoginFailedError("Login failed. Please check your credentials and page selectors.")

        engine = AnswerEngine(config.profile, config.skills, bucket=self.site.experience_bucket)
        crawler = ListingCrawler(
            driver, self.site, state, policy=self.policy, timeouts=self.timeouts, sleep=self.sleep
        )

        failures = 0
        for page, listings in crawler.pages(config.search, config.max_pages):
            for i, listing in enumerate(listings, 1):
                if state.stop_requested:
                    state.warning("Automation stopped by user")
                    return
                try:
                    self._process_job(driver, listing, f"{i}/{len(listings)}", engine, config, state)
                    failures = 0
                except Exception as exc:
                    failures += 1
                    state.warning(f"Error processing job {listing.url}: {exc}")
                    if failures >= self.max_job_failures:
                        raise AgentError(
                            f"{failures} jobs in a row failed, browser session looks unusable"
                        ) from exc
            state.info(f"Finished page {page}")

    def _process_job(
        self,
        driver: Driver,
        listing: JobListing,
        ordinal: str,
        engine: AnswerEngine,
        config: RunConfig,
        state: RunState,
    ) -> None:
        state.info(f"Opening job {ordinal} on page {listing.page}: {listing.url}")

        def result(detail: JobDetail, signals=None, apply_type=ApplyType.NO_BUTTON) -> JobResult:
            return JobResult(
                user_id=config.user_id,
                company_url=listing.url,
                page_number=listing.page,
                ordinal=ordinal,
                detail=detail,
                match=score_match(signals),
                apply_type=apply_type,
            )

        try:
            driver.goto(listing.url, self.timeouts.job_page_ms)
        except Exception as exc:
            state.warning(f"Failed to load job page: {exc}")
            self._skip(state, result(JobDetail()), SKIP_LOAD_FAILED)
            return
        self.sleep(self.timeouts.page_render)
        if state.stop_requested:
            return

        try:
            detail = scrape_detail(driver, self.site)
        except Exception as exc:
            state.warning(f"Could not scrape job details: {exc}")
            detail = JobDetail()
        state.success(f"Scraped: {detail.title or 'Unknown'} at {detail.company or 'Unknown'}")

        signals = read_signals(driver, self.site, self.timeouts.element_ms)
        if signals is None:
            state.warning("Match score widget not found, treating as no match")
        apply_type, button = detect_apply_type(driver, self.site)
        job = result(detail, signals, apply_type)
        s = job.match.signals
        state.info(
            f"Match: early={s.early_applicant} skills={s.key_skills} location={s.location} "
            f"experience={s.experience} → {job.match.score}/4 {job.match.status.value}"
        )

        if apply_type is ApplyType.EXTERNAL:
            self._skip(state, job, SKIP_EXTERNAL)
            return
        if apply_type is ApplyType.NO_BUTTON or button is None:
            self._skip(state, job, SKIP_NO_BUTTON)
            return
        if not job.match.can_apply:
            self._skip(state, job, SKIP_POOR_MATCH)
            return

        state.info("Good match, clicking Apply...")
        try:
            driver.click(button.selector())
        except Exception as exc:
            state.warning(f"Apply click failed: {exc}")
            self._skip(state, job, SKIP_APPLY_FAILED)
            return
        self.sleep(self.timeouts.after_apply_click)

        ChatbotFiller(
            driver, self.site, state, engine, poll=self.poll, timeouts=self.timeouts, sleep=self.sleep
        ).run()

        job.application_status = ApplicationStatus.APPLIED
        state.record_applied(job)
        state.success(f"Applied to {detail.title or listing.url} (total applied: {state.applied})")
        self.sleep(self.timeouts.between_jobs)

    def _skip(self, state: RunState, job: JobResult, reason: str) -> None:
        job.skip_reason = reason
        job.application_status = ApplicationStatus.SKIPPED
        state.record_skipped(job, reason)
        state.warning(f"Skipped ({reason}), total skipped: {state.skipped}")
        self.sleep(self.timeouts.between_jobs)

    # ── wind-down ───────────────────────────────────────────────────────

    def _get_store(self) -> ResultStore:
        if self._store_instance is None:
            self._store_instance = ResultStore(self.db_url)
        return self._store_instance

    def _persist(self, state: RunState) -> None:
        if not state.results:
            state.info("No job results to save")
            return
        try:
            path = export_results(state.results, self.data_dir / EXPORT_NAME)
            if path is not None:
                state.success(f"Results exported to {path.name}")
        except OSError as exc:
            state.warning(f"Could not export results: {exc}")
        try:
            saved = self._get_store().save_results(state.results)
            state.success(f"Saved {saved.inserted} result(s) to database, {saved.duplicates} duplicate(s) ignored")
        except Exception as exc:
            state.warning(f"Unable to save results to database: {exc}")

    def _log_totals(self, state: RunState) -> None:
        state.success(f"Automation completed! Applied: {state.applied}, Skipped: {state.skipped}")
        for reason, count in sorted(state.skip_reasons.items(), key=lambda kv: -kv[1]):
            state.info(f"  {reason}: {count}")

    def _screenshot(self, state: RunState) -> None:
        driver = state.session
        if driver is None:
            return
        path = self.data_dir / f"error_{datetime.now():%Y%m%d_%H%M%S}.png"
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            driver.screenshot(str(path))
            state.info(f"Saved error screenshot to {path.name}")
        except Exception as exc:
            log.debug("Screenshot failed: %s", exc)

    def _release(self, state: RunState) -> None:
        driver, state.session = state.session, None
        if driver is None:
            return
        try:
            driver.close()
            state.info("Browser closed")
        except Exception as exc:
            log.warning("Error closing browser: %s", exc)


# ── process-wide convenience wrappers ───────────────────────────────────

_default: RunController | None = None
_default_lock = threading.Lock()


def default_controller() -> RunController:
    global _default
    with _default_lock:
        if _default is None:
            _default = RunController()
        return _default


def start_automation(config: RunConfig) -> RunSummary:
    return default_controller().start(config)


def stop_automation() -> bool:
    return default_controller().stop()


def is_automation_running() -> bool:
    return default_controller().is_running
