"""Site tables: everything that is specific to one portal's markup."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from naukri_agent.locators import Descriptor


@dataclass(frozen=True)
class DetailField:
    """Where one JobDetail attribute lives on the detail page."""

    name: str
    selector: str
    many: bool = False


@dataclass(frozen=True)
class LabeledDetails:
    """Repeated ``<label>Role:</label><span>value</span>`` blocks."""

    block: str
    label: str
    values: tuple[str, ...]
    fields: dict[str, str] = field(default_factory=dict)  # label prefix -> attribute


@dataclass(frozen=True)
class StatBlocks:
    """Positional stat blocks (posted date, openings, applicants)."""

    block: str
    value: str
    fields: tuple[str, ...]


@dataclass(frozen=True)
class MatchWidget:
    container: str
    block: str
    check_icon: str


@dataclass(frozen=True)
class ChatWidget:
    container: str
    questions: str
    checkboxes: str
    radios: str
    text_input: list[Descriptor]
    send: list[Descriptor]


@dataclass(frozen=True)
class SiteProfile:
    name: str
    home_url: str
    login_url: str
    login_path_marker: str
    recommended_url: str
    default_search_url: str

    username_fields: list[Descriptor]
    password_fields: list[Descriptor]
    submit_buttons: list[Descriptor]
    login_error: str
    overlay_close: list[Descriptor]

    results_marker: str
    no_results_marker: str
    listing_page_marker: str
    job_link_marker: str
    listing_links: list[Descriptor]
    recommended_links: list[Descriptor]
    recommended_cards: str
    recommended_card_link: Callable[[str], str]

    detail_fields: list[DetailField]
    stats: StatBlocks
    labeled: LabeledDetails
    match_widget: MatchWidget
    apply_button: list[Descriptor]
    external_apply_button: list[Descriptor]
    chat: ChatWidget

    page_url: Callable[[str, int], str]
    search_url: Callable[[str, str, int | None], str]
    experience_buckets: list[tuple[int, int | None, str]]

    def experience_bucket(self, years: float | None) -> str | None:
        """Portal dropdown label for a numeric experience value."""
        if years is None or years < 0:
            return None
        for low, high, label in self.experience_buckets:
            if years >= low and (high is None or years < high):
                return label
        return None


def get_site(name: str = "naukri") -> SiteProfile:
    from naukri_agent.sites.naukri import NAUKRI

    sites = {"naukri": NAUKRI}
    try:
        return sites[name]
    except KeyError:
        raise ValueError(f"Unknown site: {name}") from None
