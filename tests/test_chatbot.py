import pytest

from fakes import El, FakeDriver, messages
from naukri_agent.answers import AnswerEngine
from naukri_agent.chatbot import ChatbotFiller
from naukri_agent.models import Profile, Skill
from naukri_agent.retry import PollPolicy, no_sleep

JOB = "https://www.naukri.com/job-listings-1"
CONTAINER = ".chatbot_MessageContainer"
QUESTIONS = ".botItem .botMsg span"
INPUT = ".textArea[contenteditable='true']"
SEND = ".sendMsg"
RADIO = ".ssrc__radio"
CHECKBOX = ".checkBoxContainer input[type='checkbox']"

PROFILE = Profile(name="Asha Rao", location="Bangalore", years_experience="6", notice_period="30 days",
                  expected_ctc="18 LPA")


@pytest.fixture
def chat_driver():
    driver = FakeDriver(start_url=JOB)
    driver.set(CONTAINER, El())
    driver.set(INPUT, El())
    driver.set(SEND, El("Send"))
    return driver


def _filler(driver, site, state, polls=5):
    engine = AnswerEngine(PROFILE, (Skill(name="Python", experience="5 years"),))
    return ChatbotFiller(driver, site, state, engine, poll=PollPolicy(max_polls=polls, interval=0), sleep=no_sleep)


def test_same_question_is_answered_once(chat_driver, site, state):
    chat_driver.set(
        QUESTIONS,
        El("Hi Asha, thank you for applying"),
        El("What is your notice period?"),
        El("What is your notice period?"),
    )

    sent = _filler(chat_driver, site, state, polls=3).run()

    assert sent == 1
    assert chat_driver.fills == [(INPUT, "30 days")]
    assert [c[1] for c in chat_driver.clicks] == [SEND]


def test_follows_conversation_until_widget_closes(chat_driver, site, state):
    chat_driver.set(QUESTIONS, El("What is your experience with Python?"))
    script = iter([
        lambda d: d.set(QUESTIONS, El("What is your experience with Python?"), El("What is your expected salary?")),
        lambda d: d.remove(CONTAINER),
    ])
    chat_driver.on_click[SEND] = lambda d, _nth: next(script)(d)

    sent = _filler(chat_driver, site, state, polls=20).run()

    assert sent == 2
    assert chat_driver.fills == [(INPUT, "5 years"), (INPUT, "18 LPA")]


def test_radio_options_are_clicked_not_typed(chat_driver, site, state):
    chat_driver.set(QUESTIONS, El("Are you residing in Mumbai?"))
    chat_driver.set(RADIO, El(label="Yes"), El(label="No"))

    _filler(chat_driver, site, state, polls=1).run()

    assert (JOB, RADIO, 1) in chat_driver.clicks
    assert chat_driver.fills == []


def test_checkboxes_take_priority_over_radios(chat_driver, site, state):
    chat_driver.set(QUESTIONS, El("Which of these apply?"))
    chat_driver.set(CHECKBOX, El(label="Skip"), El(label="Yes, all of them"))
    chat_driver.set(RADIO, El(label="No"))

    _filler(chat_driver, site, state, polls=1).run()

    clicked = [(sel, nth) for _, sel, nth in chat_driver.clicks]
    assert clicked == [(site.chat.checkboxes, 1), (SEND, 0)]


def test_no_widget_means_nothing_to_do(site, state):
    driver = FakeDriver(start_url=JOB)

    assert _filler(driver, site, state).run() == 0
    assert any("No chatbot" in m for m in messages(state))


def test_missing_input_skips_question(chat_driver, site, state):
    chat_driver.remove(INPUT)
    chat_driver.set(QUESTIONS, El("What is your notice period?"))

    assert _filler(chat_driver, site, state, polls=1).run() == 0
    assert any("Chat input not found" in m for m in messages(state))


def test_one_failing_question_does_not_stop_the_rest(chat_driver, site, state):
    chat_driver.set(QUESTIONS, El("What is your notice period?"), El("What is your expected salary?"))
    calls = {"n": 0}

    def flaky_send(_d, _nth):
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("detached")

    chat_driver.on_click[SEND] = flaky_send

    assert _filler(chat_driver, site, state, polls=1).run() == 1
    assert any("Could not answer question" in m for m in messages(state))
