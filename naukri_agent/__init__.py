"""Naukri.com auto-apply agent: crawl listings, score matches, apply, answer chatbots."""

__version__ = "0.1.0"
