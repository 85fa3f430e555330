# links.py

"""
Link repository: saved external resources with free-form tags.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from core.backend import BackendFacade
from core.model_schemas import ExternalLink
from core.results import Result

INVALID_URL_MESSAGE = "Please enter a valid URL starting with http:// or https://"
NOT_SIGNED_IN_MESSAGE = "You must be logged in to save links"
MAX_TAG_CHIPS = 6


def parse_tags(raw: str) -> List[str]:
    return [tag.strip() for tag in (raw or "").split(",") if tag.strip()]


def validate_link(title: str, url: str) -> Optional[str]:
    """
    Return an error message for an unacceptable link, else None.
    """
    if not (title or "").strip() or not (url or "").strip():
        return "Title and URL are required"
    url = url.strip()
    if not (url.startswith("http://") or url.startswith("https://")):
        return INVALID_URL_MESSAGE
    return None


def save_link(
    backend: BackendFacade,
    user_id: Optional[str],
    title: str,
    url: str,
    description: str = "",
    tags: str = "",
) -> Result:
    if not user_id:
        return Result.failure(NOT_SIGNED_IN_MESSAGE)
    problem = validate_link(title, url)
    if problem:
        return Result.failure(problem)
    return backend.create_link(user_id, title.strip(), url.strip(), (description or "").strip(), parse_tags(tags))


def all_tags(links: Iterable[ExternalLink]) -> List[str]:
    """
    Distinct tags in first-seen order.
    """
    seen = {}
    for link in links:
        for tag in link.tags:
            seen.setdefault(tag, None)
    return list(seen)


def filter_links(links: Iterable[ExternalLink], query: str = "", tags: Iterable[str] = ()) -> List[ExternalLink]:
    """
    Links carrying any of the selected tags whose title, description or
    URL contains the query (case-insensitive). Empty filters match all.
    """
    needle = (query or "").strip().lower()
    wanted = set(tags)
    matches = []
    for link in links:
        if wanted and not wanted.intersection(link.tags):
            continue
        if needle and not any(needle in text.lower() for text in (link.title, link.description, link.url)):
            continue
        matches.append(link)
    return matches
