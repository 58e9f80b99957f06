"""
Turn a chatbot question into an answer from the user's profile and skills.

Priority for free-text answers:

1. not a real question (greeting, no ``?``)  -> ``""`` (send nothing)
2. mentions one of the user's skills          -> that skill's experience / rating
3. "are you residing in X?"                   -> ``Yes`` / ``No`` against profile location
4. keyword -> profile field                   -> first non-empty field
5. anything else                              -> ``FALLBACK_ANSWER``

Single-choice widgets reuse the same signals to pick an option index.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Sequence

from naukri_agent.log import get_logger
from naukri_agent.models import Profile, Skill

log = get_logger(__name__)

FALLBACK_ANSWER = "Yes, I'm interested."
DEFAULT_SKILL_EXPERIENCE = "3 years"
DEFAULT_SKILL_RATING = "7/10"
GENERIC_SKILL_ANSWER = "Working knowledge"

GREETING_PHRASES: tuple[str, ...] = (
    "hi",
    "hello",
    "thank you",
    "thanks",
    "kindly answer",
    "please answer",
    "showing interest",
    "successfully apply",
)
_GREETING_RE = re.compile(r"\b(?:" + "|".join(re.escape(g) for g in GREETING_PHRASES) + r")\b", re.I)

RESIDING_RE = re.compile(
    r"(?:residing|living|staying|located|reside|live|stay)\s+(?:in|at)\s+([^?,.;]+?)\s*(?:[?,.;]|$)",
    re.I,
)
_RELOCATION_WORDS = ("relocate", "relocation", "residing", "reside")

_EXPERIENCE_WORDS = ("experience", "worked", "using", "years")
_RATING_WORDS = ("rate", "rating", "proficient", "good", "scale", "expertise")

_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")


def normalize(text: str) -> str:
    """Lowercase, punctuation to spaces, single-spaced."""
    return re.sub(r"\s+", " ", re.sub(r"[^\w\s]", " ", (text or "").lower())).strip()


def _has_phrase(haystack: str, needle: str) -> bool:
    return bool(needle) and f" {needle} " in f" {haystack} "


def is_valid_question(text: str) -> bool:
    stripped = (text or "").strip()
    if not stripped or not stripped.endswith("?"):
        return False
    return _GREETING_RE.search(stripped) is None


def first_number(text: str) -> float | None:
    m = _NUMBER_RE.search(text or "")
    return float(m.group()) if m else None


def _fmt_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


@dataclass(frozen=True)
class FieldRule:
    keywords: tuple[str, ...]
    getter: Callable[[Profile], str]


def _years(p: Profile) -> str:
    value = (p.years_experience or "").strip()
    if not value or value == "0":
        return ""
    return f"{value} years" if _NUMBER_RE.fullmatch(value) else value


# Most specific first: "expected salary" must not fall through to "salary".
FIELD_RULES: tuple[FieldRule, ...] = (
    FieldRule(("expected salary", "expected ctc", "expectedctc", "expectation"), lambda p: p.expected_ctc),
    FieldRule(("current salary", "current ctc", "currentctc", "salary", "ctc"), lambda p: p.current_ctc),
    FieldRule(("notice", "joining"), lambda p: p.notice_period),
    FieldRule(("total experience", "experience"), _years),
    FieldRule(("location", "city"), lambda p: p.location),
    FieldRule(("availability", "face to face", "facetoface", "meeting"), lambda p: p.availability),
    FieldRule(("full name", "fullname", "name"), lambda p: p.name),
)


class AnswerEngine:
    def __init__(
        self,
        profile: Profile,
        skills: Sequence[Skill] = (),
        *,
        bucket: Callable[[float], str | None] | None = None,
    ) -> None:
        self.profile = profile
        self.skills = list(skills)
        # portal label for a years figure, e.g. 4 -> "3-5 Yrs"
        self.bucket = bucket

    # ── free text ───────────────────────────────────────────────────────

    def answer(self, question: str) -> str:
        if not is_valid_question(question):
            log.debug("Ignored non-question: %r", question)
            return ""

        skill = self.find_skill(question)
        if skill is not None:
            return self.skill_answer(question, skill)

        residency = self.residency_answer(question)
        if residency is not None:
            return residency

        mapped = self.field_answer(question)
        if mapped:
            return mapped
        return FALLBACK_ANSWER

    def find_skill(self, question: str) -> Skill | None:
        q = normalize(question)
        for skill in self.skills:
            for name in (skill.name, skill.display_name):
                if _has_phrase(q, normalize(name)):
                    return skill
        return None

    def skill_answer(self, question: str, skill: Skill) -> str:
        q = normalize(question)
        words = set(q.split())
        if words.intersection(_EXPERIENCE_WORDS):
            return skill.experience or DEFAULT_SKILL_EXPERIENCE
        if words.intersection(_RATING_WORDS):
            if skill.rating:
                return f"{_fmt_number(skill.rating)}/{skill.out_of or 10}"
            return DEFAULT_SKILL_RATING
        return skill.experience or GENERIC_SKILL_ANSWER

    def residency_answer(self, question: str) -> str | None:
        m = RESIDING_RE.search(question)
        if not m or not self.profile.location:
            return None
        asked = m.group(1).strip().lower()
        stored = self.profile.location.strip().lower()
        if not asked:
            return None
        return "Yes" if asked in stored or stored in asked else "No"

    def field_answer(self, question: str) -> str:
        q = normalize(question)
        for rule in FIELD_RULES:
            if any(_has_phrase(q, k) for k in rule.keywords):
                value = rule.getter(self.profile)
                if value:
                    return value
        return ""

    # ── single choice ───────────────────────────────────────────────────

    def choose_option(self, labels: Sequence[str], question: str = "") -> int:
        """Index of the option to click; ``-1`` only when there are none."""
        if not labels:
            return -1
        norm = [normalize(label) for label in labels]
        q = normalize(question)

        residency = self.residency_answer(question)
        if residency is not None:
            idx = _find_word(norm, residency.lower())
            if idx >= 0:
                return idx
        if any(w in q for w in _RELOCATION_WORDS) and self.profile.location:
            idx = _find_word(norm, "yes")
            if idx >= 0:
                return idx

        years = self._years_for(question)
        if years is not None:
            wanted = self.bucket(years) if self.bucket else None
            idx = norm.index(normalize(wanted)) if wanted and normalize(wanted) in norm else -1
            if idx < 0:
                idx = pick_by_years(labels, years)
            if idx >= 0:
                return idx

        text = self.answer(question) if is_valid_question(question) else ""
        if text and text != FALLBACK_ANSWER:
            want = normalize(text)
            for i, label in enumerate(norm):
                if label and (label == want or _has_phrase(want, label) or _has_phrase(label, want)):
                    return i

        for word in ("yes", "skip"):
            idx = _find_word(norm, word)
            if idx >= 0:
                return idx
        return 0

    def _years_for(self, question: str) -> float | None:
        q = normalize(question)
        if not set(q.split()).intersection(("experience", "years", "yrs")):
            return None
        skill = self.find_skill(question)
        if skill is not None and skill.experience:
            return first_number(skill.experience)
        return first_number(self.profile.years_experience)


def _find_word(labels: Sequence[str], word: str) -> int:
    for i, label in enumerate(labels):
        if _has_phrase(label, word):
            return i
    return -1


def pick_by_years(labels: Sequence[str], years: float) -> int:
    """Option whose range ("3-5 Yrs", "10+ years", "2") covers ``years``."""
    for i, label in enumerate(labels):
        nums = [float(n) for n in _NUMBER_RE.findall(label)]
        if not nums:
            continue
        if len(nums) >= 2:
            low, high = nums[0], nums[1]
            if low <= years < high or years == high == low:
                return i
        elif "+" in label or "more" in label.lower() or "above" in label.lower():
            if years >= nums[0]:
                return i
        elif "less" in label.lower() or "below" in label.lower():
            if years < nums[0]:
                return i
        elif years == nums[0]:
            return i
    return -1
