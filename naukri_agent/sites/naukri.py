"""Naukri.com markup: selectors, URLs and pagination.

Ids first, hashed ``styles_*`` classes next, generic attribute patterns
last. When Naukri reshuffles its markup, the generic tail keeps login and
crawling alive until this table is refreshed.
"""
from __future__ import annotations

import re
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from naukri_agent.locators import ByAttr, ByCss, ById, ByRole, ByText, ByType, css, placeholder
from naukri_agent.sites import (
    ChatWidget,
    DetailField,
    LabeledDetails,
    MatchWidget,
    SiteProfile,
    StatBlocks,
)

BASE = "https://www.naukri.com"


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def page_url(base_url: str, page: int) -> str:
    """``/python-jobs?k=..`` -> ``/python-jobs-2?k=..`` for page 2."""
    if page <= 1:
        return base_url
    if "-jobs" in base_url:
        head, tail = base_url.split("-jobs", 1)
        return f"{head}-jobs-{page}{tail}"
    parts = urlsplit(base_url)
    query = dict(parse_qsl(parts.query))
    query["pageNo"] = str(page)
    return urlunsplit(parts._replace(query=urlencode(query)))


def search_url(keywords: str, location: str = "", experience: int | None = None) -> str:
    path = f"{_slug(keywords)}-jobs"
    query: dict[str, str] = {"k": keywords.strip()}
    if location.strip():
        path += f"-in-{_slug(location)}"
        query["l"] = location.strip()
    if experience is not None:
        query["experience"] = str(experience)
    return f"{BASE}/{path}?{urlencode(query)}"


NAUKRI = SiteProfile(
    name="naukri",
    home_url=f"{BASE}/mnjuser/homepage",
    login_url=f"{BASE}/nlogin/login",
    login_path_marker="nlogin",
    recommended_url=f"{BASE}/mnjuser/recommendedjobs",
    default_search_url=search_url("java full stack developer"),
    username_fields=[
        ById("usernameField"),
        placeholder("Email"),
        placeholder("Username"),
        ByAttr("name", "email", contains=False),
        ByAttr("name", "username", contains=False),
        ByCss('.loginInput input[type="text"]'),
        ByCss('#login_Layer input[type="text"]'),
        ByType("text", within="form"),
    ],
    password_fields=[
        ById("passwordField"),
        ByType("password"),
        placeholder("Password"),
        ByAttr("name", "password", contains=False),
        ByCss('.loginInput input[type="password"]'),
        ByType("password", within="form"),
    ],
    submit_buttons=[
        ByCss("button[type='submit'].blue-btn"),
        ByCss("button[type='submit']"),
        ByCss("button.btn-large.blue-btn"),
        ByCss("button.loginButton"),
        ByText("Login"),
        ByRole("button", "Login"),
        ByCss("input[type='submit']"),
    ],
    login_error=".error, .errorMsg, .server-err",
    overlay_close=css(
        ".crossIcon",
        "button[aria-label='Close']",
        "[class*='styles_modal-close']",
        "[class*='styles_close']",
        ".nI-gNb-sb__icon-wrapper",
    ),
    results_marker="a.title, .srp-jobtuple-wrapper, .jobTuple, article[data-job-id]",
    no_results_marker=".noResult, .no-result, [class*='styles_no-result']",
    listing_page_marker="-jobs",
    job_link_marker="job-listings",
    listing_links=css(
        "a.title",
        ".jobTuple a.title",
        "article[data-job-id] a",
        ".srp-jobtuple-wrapper a.title",
        ".cust-job-tuple a.title",
        '.list a[href*="job-listings"]',
    ),
    recommended_links=css(
        ".reco-container .left-sec .sim-jobs .list article a",
        '.jobTuple a[href*="job-listings"]',
        'article[data-job-id] a[href*="job-listings"]',
        ".jobTupleHeader a",
        'a.title[href*="job-listings"]',
    ),
    recommended_cards="article[data-job-id]",
    recommended_card_link=lambda job_id: f"{BASE}/job-listings-{job_id}",
    detail_fields=[
        DetailField("title", "h1[class*='jd-header-title']"),
        DetailField("company", "[class*='jd-header-comp-name'] > a"),
        DetailField("experience_required", "[class*='jhc__exp'] span"),
        DetailField("salary", "[class*='jhc__salary'] span"),
        DetailField("location", "[class*='jhc__location'] a"),
        DetailField("key_skills", "[class*='styles_chip'] span", many=True),
        DetailField("company_rating", "[class*='amb-rating']"),
        DetailField("highlights", "[class*='job-highlight-list'] li", many=True),
    ],
    stats=StatBlocks(
        block="[class*='jhc__stat']",
        value="span:last-child",
        fields=("posted_date", "openings", "applicants"),
    ),
    labeled=LabeledDetails(
        block="[class*='styles_other-details'] [class*='styles_details']",
        label="label",
        values=("span", "a"),
        fields={
            "Role Category": "role_category",
            "Role": "role",
            "Industry Type": "industry_type",
            "Employment Type": "employment_type",
        },
    ),
    match_widget=MatchWidget(
        container="[class*='JDC__match-score']",
        block="[class*='MS__details']",
        check_icon=".ni-icon-check_circle",
    ),
    apply_button=[ById("apply-button")],
    external_apply_button=[ById("company-site-button")],
    chat=ChatWidget(
        container=".chatbot_MessageContainer",
        questions=".botItem .botMsg span",
        checkboxes=".checkBoxContainer input[type='radio'], .checkBoxContainer input[type='checkbox']",
        radios=".ssrc__radio",
        text_input=[
            ByCss(".textArea[contenteditable='true']"),
            ByCss("[contenteditable='true']"),
            ByCss(".chatbot_InputContainer input"),
        ],
        send=[ByCss(".sendMsg"), ByText("Save"), ByText("Send")],
    ),
    page_url=page_url,
    search_url=search_url,
    experience_buckets=[
        (0, 1, "0-1 Yrs"),
        (1, 3, "1-3 Yrs"),
        (3, 5, "3-5 Yrs"),
        (5, 7, "5-7 Yrs"),
        (7, 10, "7-10 Yrs"),
        (10, 15, "10-15 Yrs"),
        (15, 20, "15-20 Yrs"),
        (20, None, "20+ Yrs"),
    ],
)
