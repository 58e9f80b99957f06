"""Walk paginated search results and collect job detail links."""
from __future__ import annotations

import time
from typing import Iterator

from naukri_agent.browser import Driver
from naukri_agent.events import RunState
from naukri_agent.locators import ByCss, collect_links, dedupe
from naukri_agent.log import get_logger
from naukri_agent.models import JobListing, SearchTarget
from naukri_agent.navigation import auto_scroll, safe_load
from naukri_agent.retry import RetryPolicy, Sleep, Timeouts
from naukri_agent.sites import SiteProfile

log = get_logger(__name__)

_ANY_ANCHOR = ByCss("a")


class ListingCrawler:
    def __init__(
        self,
        driver: Driver,
        site: SiteProfile,
        state: RunState,
        *,
        policy: RetryPolicy = RetryPolicy(),
        timeouts: Timeouts = Timeouts(),
        sleep: Sleep = time.sleep,
    ) -> None:
        self.driver = driver
        self.site = site
        self.state = state
        self.policy = policy
        self.timeouts = timeouts
        self.sleep = sleep

    def base_url(self, target: SearchTarget) -> str:
        if target.mode == "recommended":
            return self.site.recommended_url
        if target.url:
            return target.url
        if target.keywords.strip():
            return self.site.search_url(target.keywords, target.location, target.experience)
        self.state.warning(f"No search URL or keywords configured. Using default: {self.site.default_search_url}")
        return self.site.default_search_url

    def page_url(self, base_url: str, page: int) -> str:
        return self.site.page_url(base_url, page)

    def pages(self, target: SearchTarget, max_pages: int) -> Iterator[tuple[int, list[JobListing]]]:
        """Yield ``(page_number, listings)`` lazily, one page at a time.

        Pages that fail to load are logged and skipped. A URL already seen
        earlier in this crawl is dropped. Stops early when the run's stop
        flag is set.
        """
        recommended = target.mode == "recommended"
        base = self.base_url(target)
        last = 1 if recommended else max_pages
        seen: set[str] = set()
        for page in range(1, last + 1):
            if self.state.stop_requested:
                self.state.warning("Automation stopped by user")
                return
            url = base if recommended else self.page_url(base, page)
            self.state.info(f"Opening Page {page}/{last}: {url}")
            listings = self.crawl_page(url, page, recommended=recommended)
            if listings is None:
                self.state.warning(f"Skipping page {page} due to loading issues...")
                continue
            fresh = [job for job in listings if job.url not in seen]
            seen.update(job.url for job in fresh)
            if len(fresh) < len(listings):
                self.state.info(f"Dropped {len(listings) - len(fresh)} job(s) already seen on earlier pages")
            yield page, fresh

    def crawl_page(self, url: str, page: int, *, recommended: bool = False) -> list[JobListing] | None:
        markers = None
        if not recommended and self.site.listing_page_marker in url:
            markers = (self.site.results_marker, self.site.no_results_marker)
        loaded = safe_load(
            self.driver,
            url,
            self.state,
            markers=markers,
            policy=self.policy,
            timeouts=self.timeouts,
            sleep=self.sleep,
        )
        if not loaded:
            return None
        auto_scroll(self.driver, self.state)
        self.sleep(1.0)

        links = self.extract_links(recommended=recommended)
        if links:
            self.state.info(f"Found {len(links)} jobs on page {page}")
        else:
            self.state.warning(f"No job links found on page {page}")
        return [JobListing(url=link, page=page) for link in links]

    def extract_links(self, *, recommended: bool = False) -> list[str]:
        marker = self.site.job_link_marker
        descriptors = self.site.recommended_links if recommended else self.site.listing_links
        desc, links = collect_links(self.driver, descriptors, must_contain=marker)
        if links:
            self.state.info(f"Found jobs using selector: {desc}")
            return links

        if recommended:
            ids = self.driver.attributes(self.site.recommended_cards, "data-job-id")
            links = dedupe(self.site.recommended_card_link(i) for i in ids if i)
            if links:
                self.state.info("Found jobs from job-id cards")
                return links

        self.state.warning("Standard selectors failed, trying aggressive link search...")
        _, links = collect_links(self.driver, [_ANY_ANCHOR], must_contain=marker)
        return links
