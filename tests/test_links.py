from unittest.mock import MagicMock

import pytest

from core.backend import BackendFacade
from core.links import (
    INVALID_URL_MESSAGE, NOT_SIGNED_IN_MESSAGE, all_tags, filter_links, parse_tags, save_link, validate_link
)
from core.model_schemas import ExternalLink
from core.results import Result


@pytest.fixture
def links():
    return [
        ExternalLink(id="l1", title="React Docs", url="https://react.dev", description="Official documentation",
                     tags=["React", "Documentation"]),
        ExternalLink(id="l2", title="Tailwind", url="https://tailwindcss.com", description="Utility-first CSS",
                     tags=["CSS", "Design"]),
        ExternalLink(id="l3", title="Khan Academy", url="https://www.khanacademy.org", tags=[]),
    ]


def test_parse_tags():
    assert parse_tags(" exam, biology ,,  ") == ["exam", "biology"]
    assert parse_tags("") == []


@pytest.mark.parametrize("title, url, expected", [
    ("MDN", "https://developer.mozilla.org", None),
    ("MDN", "http://example.org", None),
    ("MDN", "ftp://example.org", INVALID_URL_MESSAGE),
    ("MDN", "developer.mozilla.org", INVALID_URL_MESSAGE),
    ("  ", "https://example.org", "Title and URL are required"),
])
def test_validate_link(title, url, expected):
    assert validate_link(title, url) == expected


def test_save_link_requires_user():
    backend = MagicMock(spec=BackendFacade)

    result = save_link(backend, None, "MDN", "https://developer.mozilla.org")

    assert result.error == NOT_SIGNED_IN_MESSAGE
    backend.create_link.assert_not_called()


def test_save_link_rejects_bad_url():
    backend = MagicMock(spec=BackendFacade)

    result = save_link(backend, "user-1", "MDN", "developer.mozilla.org")

    assert result.error == INVALID_URL_MESSAGE
    backend.create_link.assert_not_called()


def test_save_link_splits_tags():
    backend = MagicMock(spec=BackendFacade)
    backend.create_link.return_value = Result.success(ExternalLink(id="l1", title="MDN", url="https://mdn.dev"))

    result = save_link(backend, "user-1", " MDN ", " https://mdn.dev ", " Web docs ", "Docs, Web")

    assert result.ok
    backend.create_link.assert_called_once_with("user-1", "MDN", "https://mdn.dev", "Web docs", ["Docs", "Web"])


def test_all_tags_keeps_first_seen_order(links):
    links.append(ExternalLink(id="l4", title="Vue", url="https://vuejs.org", tags=["Documentation", "Vue"]))
    assert all_tags(links) == ["React", "Documentation", "CSS", "Design", "Vue"]


def test_filter_links_without_filters_keeps_everything(links):
    assert filter_links(links) == links


def test_filter_links_by_any_selected_tag(links):
    assert [link.id for link in filter_links(links, tags=["CSS", "React"])] == ["l1", "l2"]


@pytest.mark.parametrize("query, expected", [
    ("tailwind", ["l2"]),
    ("DOCUMENTATION", ["l1"]),
    ("khanacademy.org", ["l3"]),
    ("nothing here", []),
])
def test_filter_links_searches_title_description_and_url(links, query, expected):
    assert [link.id for link in filter_links(links, query)] == expected


def test_filter_links_combines_search_and_tags(links):
    assert filter_links(links, "utility", ["React"]) == []
    assert [link.id for link in filter_links(links, "utility", ["CSS"])] == ["l2"]
