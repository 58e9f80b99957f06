import itertools

from fakes import El, FakeDriver, job_page
from naukri_agent.models import ApplyType, MatchSignals, MatchStatus
from naukri_agent.scorer import detect_apply_type, read_signals, score_match, scrape_detail

JOB = "https://www.naukri.com/job-listings-1"


def test_only_four_of_four_can_apply():
    for flags in itertools.product([False, True], repeat=4):
        result = score_match(MatchSignals(*flags))
        assert result.score == sum(flags)
        assert result.can_apply is all(flags)
        assert result.status is (MatchStatus.GOOD if all(flags) else MatchStatus.POOR)


def test_missing_widget_scores_zero():
    result = score_match(None)
    assert result.score == 0
    assert not result.can_apply


def test_read_signals_from_widget_ticks(site):
    driver = FakeDriver()
    job_page(driver, site, JOB, ticks=(True, False, True, True))
    driver.goto(JOB, 1000)

    assert read_signals(driver, site) == MatchSignals(True, False, True, True)


def test_read_signals_pads_short_widget(site):
    driver = FakeDriver()
    job_page(driver, site, JOB, ticks=(True, True))
    driver.goto(JOB, 1000)

    assert read_signals(driver, site) == MatchSignals(True, True, False, False)


def test_read_signals_none_without_widget(site):
    driver = FakeDriver()
    job_page(driver, site, JOB, ticks=None)
    driver.goto(JOB, 1000)

    assert read_signals(driver, site) is None


def test_scrape_detail_reads_fields_stats_and_labels(site):
    driver = FakeDriver()
    job_page(driver, site, JOB, title="Backend Engineer", company="Globex")
    driver.goto(JOB, 1000)
    driver.set("[class*='jhc__salary'] span", El("12-18 Lacs P.A."))
    driver.set(
        site.stats.block,
        El(children={"span:last-child": "2 days ago"}),
        El(children={"span:last-child": "3"}),
        El(children={"span:last-child": "100+"}),
    )
    driver.set(
        site.labeled.block,
        El(children={"label": "Role:", "span": "Software Engineer", "a": None}),
        El(children={"label": "Industry Type:", "span": None, "a": "IT Services"}),
        El(children={"label": "Shift:", "span": "Day", "a": None}),
    )

    detail = scrape_detail(driver, site)

    assert detail.title == "Backend Engineer"
    assert detail.company == "Globex"
    assert detail.salary == "12-18 Lacs P.A."
    assert detail.key_skills == ["Python", "SQL"]
    assert detail.highlights == []
    assert (detail.posted_date, detail.openings, detail.applicants) == ("2 days ago", "3", "100+")
    assert detail.role == "Software Engineer"
    assert detail.industry_type == "IT Services"
    assert detail.location is None


def test_external_button_wins_over_direct(site):
    driver = FakeDriver()
    job_page(driver, site, JOB, apply="external")
    driver.goto(JOB, 1000)
    driver.set("#apply-button", El("Apply"))

    assert detect_apply_type(driver, site) == (ApplyType.EXTERNAL, None)


def test_direct_and_missing_buttons(site):
    driver = FakeDriver()
    job_page(driver, site, JOB)
    driver.goto(JOB, 1000)
    kind, button = detect_apply_type(driver, site)
    assert kind is ApplyType.DIRECT
    assert button.selector() == "#apply-button"

    driver.remove("#apply-button")
    assert detect_apply_type(driver, site) == (ApplyType.NO_BUTTON, None)
