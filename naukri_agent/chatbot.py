"""Answer the chat-style questionnaire that pops up after clicking Apply."""
from __future__ import annotations

import time

from naukri_agent.answers import AnswerEngine
from naukri_agent.browser import Driver
from naukri_agent.events import RunState
from naukri_agent.locators import resolve
from naukri_agent.log import get_logger
from naukri_agent.retry import PollPolicy, Sleep, Timeouts
from naukri_agent.sites import SiteProfile

log = get_logger(__name__)


class ChatbotFiller:
    """One instance per application; ``answered`` dies with it."""

    def __init__(
        self,
        driver: Driver,
        site: SiteProfile,
        state: RunState,
        engine: AnswerEngine,
        *,
        poll: PollPolicy = PollPolicy(),
        timeouts: Timeouts = Timeouts(),
        sleep: Sleep = time.sleep,
    ) -> None:
        self.driver = driver
        self.chat = site.chat
        self.state = state
        self.engine = engine
        self.poll = poll
        self.timeouts = timeouts
        self.sleep = sleep
        self.answered: set[str] = set()
        self.sent = 0

    def run(self) -> int:
        """Poll and answer until the widget closes or polls run out.

        Returns the number of answers sent.
        """
        if not self.driver.wait_for(self.chat.container, self.timeouts.chat_open_ms):
            self.state.info("No chatbot questionnaire appeared")
            return 0

        for _ in range(self.poll.max_polls):
            if not self.driver.count(self.chat.container):
                break
            for question in self.driver.texts(self.chat.questions):
                if question in self.answered:
                    continue
                self.answered.add(question)
                self.state.info(f"Question: {question}")
                try:
                    if self.answer_question(question):
                        self.sent += 1
                except Exception as exc:
                    self.state.warning(f"Could not answer question, skipping it: {exc}")
            self.sleep(self.poll.interval)

        self.state.success(f"Chatbot answers completed! ({self.sent} sent)")
        return self.sent

    def answer_question(self, question: str) -> bool:
        # choice widgets first: they cannot be answered by typing
        for selector, kind in ((self.chat.checkboxes, "Checkbox"), (self.chat.radios, "Radio")):
            if self.choose(selector, question):
                self.state.success(f"{kind} question auto-answered")
                return True

        text = self.engine.answer(question)
        if not text:
            self.state.info("Not an interview question, nothing sent")
            return False

        field = resolve(self.driver, self.chat.text_input)
        if field is None:
            self.state.warning("Chat input not found, skipping this question")
            return False
        self.driver.fill(field.selector(), text)
        self.state.success(f"Answer: {text}")
        self.send()
        self.sleep(self.poll.interval)
        return True

    def choose(self, selector: str, question: str) -> bool:
        total = self.driver.count(selector)
        if not total:
            return False
        labels = self.driver.option_labels(selector)
        if len(labels) != total:
            labels = (list(labels) + [""] * total)[:total]
        self.state.info(f"Options: {', '.join(label or '?' for label in labels)}")

        idx = self.engine.choose_option(labels, question)
        if not 0 <= idx < total:
            idx = 0
        self.driver.click(selector, nth=idx)
        self.state.success(f"Selected option {idx + 1}: {labels[idx] or '?'}")
        self.sleep(0.3)
        self.send()
        return True

    def send(self) -> None:
        button = resolve(self.driver, self.chat.send)
        if button is not None:
            self.driver.click(button.selector())
        else:
            log.debug("No send button; pressing Enter")
            self.driver.press("Enter")
