from fakes import El, FakeDriver, messages
from naukri_agent.events import RunState
from naukri_agent.navigation import safe_load
from naukri_agent.retry import RetryPolicy, Timeouts, no_sleep

URL = "https://www.naukri.com/python-jobs?k=python"
MARKERS = ("a.title, .jobTuple", ".noResult")


def test_safe_load_retries_with_backoff_then_succeeds():
    driver = FakeDriver()
    driver.fail_goto[URL] = 2
    waits: list[float] = []
    state = RunState()

    assert safe_load(driver, URL, state, sleep=waits.append) is True
    assert driver.visits == [URL, URL, URL]
    assert waits == [2.0, 3.0, Timeouts().page_render]
    assert sum("Retrying page load" in m for m in messages(state)) == 2
    assert driver.reloads == 2


def test_safe_load_gives_up_without_raising():
    driver = FakeDriver()
    driver.fail_goto[URL] = -1
    state = RunState()

    assert safe_load(driver, URL, state, policy=RetryPolicy(max_attempts=2), sleep=no_sleep) is False
    assert len(driver.visits) == 2
    assert state.logs[-1].severity.value == "error"


def test_safe_load_requires_a_results_marker():
    driver = FakeDriver()
    driver.body_length[URL] = 100
    state = RunState()

    assert safe_load(driver, URL, state, markers=MARKERS, sleep=no_sleep) is False
    assert any("Page appears empty" in m for m in messages(state))


def test_safe_load_scrolls_once_before_failing_a_long_page():
    driver = FakeDriver()
    state = RunState()

    ok = safe_load(driver, URL, state, markers=MARKERS, policy=RetryPolicy(max_attempts=1), sleep=no_sleep)

    assert ok is False
    assert driver.scrolls == 1


def test_safe_load_accepts_either_marker():
    driver = FakeDriver()
    driver.set(".noResult", El("No jobs found"), url=URL)

    assert safe_load(driver, URL, RunState(), markers=MARKERS, sleep=no_sleep) is True


def test_failed_reload_does_not_stop_the_retry():
    driver = FakeDriver()
    driver.fail_goto[URL] = 1

    def broken_reload(timeout_ms):
        raise TimeoutError("reload timed out")

    driver.reload = broken_reload

    assert safe_load(driver, URL, RunState(), sleep=no_sleep) is True
    assert driver.visits == [URL, URL]
