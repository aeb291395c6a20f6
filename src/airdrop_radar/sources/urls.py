"""Helpers for post URLs."""

import re

POST_URL_RE = re.compile(r"^https?://(www\.)?(twitter\.com|x\.com)/[^/]+/status/\d+")
POST_ID_RE = re.compile(r"status/(\d+)")
USERNAME_RE = re.compile(r"(?:twitter\.com|x\.com)/([^/]+)/status")
URL_RE = re.compile(r"https?://[^\s]+")


def is_valid_post_url(url: str) -> bool:
    """Check that a URL points at a single X/Twitter post."""
    return bool(POST_URL_RE.match(url or ""))


def extract_post_id(url: str) -> str | None:
    match = POST_ID_RE.search(url)
    return match.group(1) if match else None


def extract_username(url: str) -> str | None:
    match = USERNAME_RE.search(url)
    return match.group(1) if match else None


def find_urls(text: str) -> list[str]:
    """Pull every http(s) URL out of free text, in order."""
    return URL_RE.findall(text or "")
