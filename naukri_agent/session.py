"""
Login state machine.

    UNAUTHENTICATED -> CREDENTIALS_ENTERED -> SUBMITTED -> AUTHENTICATED
                                                        `-> FAILED

Any step can drop to FAILED; the controller treats that as run-fatal.
"""
from __future__ import annotations

import time
from enum import Enum

from naukri_agent.browser import Driver
from naukri_agent.events import RunState
from naukri_agent.locators import Descriptor, resolve
from naukri_agent.log import get_logger
from naukri_agent.models import Credentials
from naukri_agent.navigation import safe_load
from naukri_agent.retry import RetryPolicy, Sleep, Timeouts
from naukri_agent.sites import SiteProfile

log = get_logger(__name__)


class LoginPhase(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    CREDENTIALS_ENTERED = "credentials_entered"
    SUBMITTED = "submitted"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class SessionController:
    def __init__(
        self,
        driver: Driver,
        site: SiteProfile,
        state: RunState,
        *,
        timeouts: Timeouts = Timeouts(),
        policy: RetryPolicy = RetryPolicy(),
        sleep: Sleep = time.sleep,
        max_overlays: int = 6,
    ) -> None:
        self.driver = driver
        self.site = site
        self.state = state
        self.timeouts = timeouts
        self.policy = policy
        self.sleep = sleep
        self.max_overlays = max_overlays
        self.phase = LoginPhase.UNAUTHENTICATED
        self._password_field: Descriptor | None = None

    @property
    def authenticated(self) -> bool:
        return self.phase is LoginPhase.AUTHENTICATED

    def login(self, credentials: Credentials) -> bool:
        self.phase = LoginPhase.UNAUTHENTICATED
        self.state.info(f"Opening {self.site.name} login page...")
        loaded = safe_load(
            self.driver,
            self.site.login_url,
            self.state,
            policy=self.policy,
            timeouts=self.timeouts,
            sleep=self.sleep,
        )
        if not loaded:
            return self._fail("Login page never finished loading")

        try:
            if not self.enter_credentials(credentials):
                return False
            self.submit()
        except Exception as exc:
            return self._fail(f"Login error: {exc}")
        return self.verify()

    def enter_credentials(self, credentials: Credentials) -> bool:
        self.state.info("Locating login fields...")
        user = resolve(self.driver, self.site.username_fields)
        password = resolve(self.driver, self.site.password_fields)
        if user is None:
            return self._fail("Could not find email/username field with any known selector")
        if password is None:
            return self._fail("Could not find password field with any known selector")
        self.state.info(f"Found login fields: {user} / {password}")

        self.driver.fill(user.selector(), credentials.email)
        self.sleep(0.8)
        self.driver.fill(password.selector(), credentials.password)
        self.sleep(0.8)
        self._password_field = password
        self.phase = LoginPhase.CREDENTIALS_ENTERED
        return True

    def submit(self) -> None:
        if self.phase is not LoginPhase.CREDENTIALS_ENTERED:
            raise RuntimeError(f"Cannot submit from phase {self.phase.value}")
        button = resolve(self.driver, self.site.submit_buttons)
        if button is not None:
            self.driver.click(button.selector())
            self.state.info(f"Clicked submit button: {button}")
        else:
            self.state.info("No submit button found, pressing Enter...")
            self.driver.press("Enter", self._password_field.selector())
        self.phase = LoginPhase.SUBMITTED

    def verify(self) -> bool:
        self.state.info("Waiting for login response...")
        self.sleep(self.timeouts.login_settle)

        error = self.driver.text(self.site.login_error) if self.driver.is_visible(self.site.login_error) else None
        if error:
            return self._fail(f"Login error message: {error}")
        if self.site.login_path_marker in self.driver.url:
            return self._fail("Login failed - still on login page. Please check your credentials")

        self.phase = LoginPhase.AUTHENTICATED
        self.state.success("Login successful!")
        self.state.info("Waiting for session to stabilize...")
        self.sleep(self.timeouts.session_settle)
        self.dismiss_overlays()
        self.state.success("Session stabilized, ready to proceed")
        return True

    def dismiss_overlays(self) -> int:
        """Close post-login popups; best effort, returns how many closed."""
        closed = 0
        for desc in self.site.overlay_close[: self.max_overlays]:
            sel = desc.selector()
            try:
                if self.driver.count(sel) and self.driver.is_visible(sel):
                    self.driver.click(sel)
                    closed += 1
                    self.sleep(0.5)
            except Exception as exc:
                log.debug("Overlay %s not dismissed: %s", sel, exc)
        try:
            self.driver.press("Escape")
        except Exception as exc:
            log.debug("Escape press failed: %s", exc)
        if closed:
            self.state.info(f"Closed {closed} popup(s) after login")
        return closed

    def _fail(self, reason: str) -> bool:
        self.phase = LoginPhase.FAILED
        self.state.error(reason)
        return False
