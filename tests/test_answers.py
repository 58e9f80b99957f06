import pytest

from naukri_agent.answers import FALLBACK_ANSWER, AnswerEngine, is_valid_question, pick_by_years
from naukri_agent.models import Profile, Skill
from naukri_agent.sites import get_site

PROFILE = Profile(
    name="Asha Rao",
    location="Bangalore",
    years_experience="6",
    current_ctc="12 LPA",
    expected_ctc="18 LPA",
    notice_period="30 days",
    availability="Weekdays after 5 PM",
)
SKILLS = (
    Skill(name="Python", experience="5 years", rating=8),
    Skill(name="Java"),
    Skill(name="AWS", display_name="Amazon Web Services", experience="2 years"),
)


@pytest.fixture
def engine():
    return AnswerEngine(PROFILE, SKILLS, bucket=get_site().experience_bucket)


def test_skill_experience_beats_generic_experience_field(engine):
    assert engine.answer("What is your experience with Python?") == "5 years"


@pytest.mark.parametrize(
    "text",
    [
        "Hi Asha, thank you for showing interest",
        "Please answer a few questions",
        "Hello! What is your notice period?",
        "Current CTC",
        "",
    ],
)
def test_greetings_and_statements_get_no_answer(engine, text):
    assert engine.answer(text) == ""


def test_greeting_words_match_whole_words_only():
    assert is_valid_question("Which city do you live in?")
    assert is_valid_question("Is this role a fit for you?")


def test_skill_defaults(engine):
    assert engine.answer("How many years of experience do you have in Java?") == "3 years"
    assert engine.answer("How would you rate yourself in Java?") == "7/10"
    assert engine.answer("Rate your Python skills on a scale of 10?") == "8/10"
    assert engine.answer("Are you comfortable with Amazon Web Services?") == "2 years"


def test_skill_name_is_not_matched_inside_longer_words(engine):
    assert engine.answer("How many years of JavaScript experience do you have?") == "6 years"


def test_residency(engine):
    assert engine.answer("Are you currently residing in Bangalore?") == "Yes"
    assert engine.answer("Are you living in Pune?") == "No"
    assert engine.answer("Are you currently residing in Bangalore, Karnataka?") == "Yes"
    assert engine.answer("Are you living in Pune, Maharashtra?") == "No"


@pytest.mark.parametrize(
    "question, expected",
    [
        ("What is your expected salary?", "18 LPA"),
        ("What is your current CTC?", "12 LPA"),
        ("What is your notice period?", "30 days"),
        ("How many years of total experience do you have?", "6 years"),
        ("What is your current location?", "Bangalore"),
        ("What is your availability for a face to face interview?", "Weekdays after 5 PM"),
        ("Please share your full name?", "Asha Rao"),
        ("Why do you want to join us?", FALLBACK_ANSWER),
        ("What is your ethnicity?", FALLBACK_ANSWER),
        ("What is your GitHub username?", FALLBACK_ANSWER),
        ("What is your team capacity?", FALLBACK_ANSWER),
    ],
)
def test_keyword_to_profile_field(engine, question, expected):
    assert engine.answer(question) == expected


def test_years_with_unit_are_not_suffixed_twice():
    engine = AnswerEngine(Profile(years_experience="6 years"), ())
    assert engine.answer("How many years of total experience do you have?") == "6 years"


def test_empty_profile_field_falls_through(engine):
    bare = AnswerEngine(Profile(location="Pune"), ())
    assert bare.answer("What is your notice period?") == FALLBACK_ANSWER


def test_choose_option_prefers_yes_over_skip_over_first(engine):
    assert engine.choose_option(["Skip this question", "Yes", "No"], "Do you have a passport?") == 1
    assert engine.choose_option(["Maybe", "Skip"], "Do you have a passport?") == 1
    assert engine.choose_option(["Red", "Blue"], "Favourite colour?") == 0
    assert engine.choose_option([], "Anything?") == -1


def test_choose_option_residency_and_relocation(engine):
    assert engine.choose_option(["Yes", "No"], "Are you residing in Mumbai?") == 1
    assert engine.choose_option(["No", "Yes"], "Are you willing to relocate?") == 1


def test_choose_option_experience_range(engine):
    labels = ["0-1 Yrs", "1-3 Yrs", "3-5 Yrs", "5-7 Yrs", "7-10 Yrs"]
    assert engine.choose_option(labels, "How many years of experience do you have?") == 3
    assert engine.choose_option(labels, "Years of experience in AWS?") == 1


def test_pick_by_years_handles_open_ranges():
    assert pick_by_years(["Less than 2", "2-5 years", "5+ years"], 1) == 0
    assert pick_by_years(["Less than 2", "2-5 years", "5+ years"], 3) == 1
    assert pick_by_years(["Less than 2", "2-5 years", "5+ years"], 12) == 2
    assert pick_by_years(["Yes", "No"], 3) == -1


def test_experience_bucket_mapping():
    site = get_site()
    assert site.experience_bucket(0) == "0-1 Yrs"
    assert site.experience_bucket(4) == "3-5 Yrs"
    assert site.experience_bucket(25) == "20+ Yrs"
    assert site.experience_bucket(None) is None
