import pytest
import requests

from conftest import BASE_URL, contributor, make_response
from contributor_stats.client import (
    ContributorsClient,
    PageFetchError,
    ensure_usable,
    parse_link_header,
    parse_link_relation,
)
from contributor_stats.models import PageResponse, RepositoryRef

LINK = (
    '<https://api.github.com/repositories/1/contributors?per_page=1&anon=1&page=2>; rel="next", '
    '<https://api.github.com/repositories/1/contributors?per_page=1&anon=1&page=42>; rel="last"'
)


def test_parse_link_header():
    links = parse_link_header(LINK)
    assert links == {
        "next": "https://api.github.com/repositories/1/contributors?per_page=1&anon=1&page=2",
        "last": "https://api.github.com/repositories/1/contributors?per_page=1&anon=1&page=42",
    }


def test_parse_link_header_ignores_malformed_entries():
    assert parse_link_header("") == {}
    assert parse_link_header("<https://example.com/a>") == {}
    assert parse_link_header('<>; rel="next"') == {}


def test_parse_link_header_url_with_comma():
    header = (
        '<https://api.github.com/x?q=a,b&page=2>; rel="next", '
        '<https://api.github.com/x?q=a,b&page=42>; rel="last"'
    )
    assert parse_link_header(header) == {
        "next": "https://api.github.com/x?q=a,b&page=2",
        "last": "https://api.github.com/x?q=a,b&page=42",
    }
    assert parse_link_relation(f"Link: {header}\r\n", "last").endswith("q=a,b&page=42")


def test_parse_link_relation_header_name_is_case_insensitive():
    for name in ("Link", "link", "LINK"):
        header_text = f"Content-Type: application/json\r\n{name}: {LINK}\r\n"
        assert parse_link_relation(header_text, "last").endswith("page=42")


def test_parse_link_relation_matches_relation_exactly():
    header_text = 'link: <https://example.com/?page=2>; rel="nextpage"\r\n'
    assert parse_link_relation(header_text, "next") is None
    assert parse_link_relation(header_text, "nextpage") == "https://example.com/?page=2"
    assert parse_link_relation("link: " + LINK, "Next") is None


def test_parse_link_relation_absent():
    assert parse_link_relation("Content-Type: application/json\r\n", "next") is None
    assert parse_link_relation("", "last") is None


def test_client_sets_api_headers(client, session):
    assert session.headers["Authorization"] == "Bearer test-token"
    assert session.headers["Accept"] == "application/vnd.github+json"
    assert session.headers["X-GitHub-Api-Version"] == "2022-11-28"


def test_contributors_url(client):
    url = client.contributors_url(RepositoryRef("octocat", "Hello-World"))
    assert url == f"{BASE_URL}/repos/octocat/Hello-World/contributors"


def test_fetch_page_adds_page_size_and_anonymous(client, session):
    session.get.return_value = make_response(200, [contributor("alice")], {"Link": LINK})

    page = client.fetch_page(f"{BASE_URL}/repos/o/r/contributors", page_size=1)

    session.get.assert_called_once_with(
        f"{BASE_URL}/repos/o/r/contributors",
        params={"per_page": 1, "anon": 1},
        timeout=30.0,
        allow_redirects=True,
    )
    assert page.status_code == 200
    assert page.contributors == [contributor("alice")]
    assert parse_link_relation(page.header_text, "next").endswith("page=2")


def test_fetch_page_keeps_query_of_next_link(client, session):
    session.get.return_value = make_response(200, [])
    next_url = f"{BASE_URL}/repositories/1/contributors?per_page=100&anon=1&page=3"

    client.fetch_page(next_url, page_size=100)

    session.get.assert_called_once_with(next_url, params=None, timeout=30.0, allow_redirects=True)


def test_fetch_page_without_anonymous(client, session):
    session.get.return_value = make_response(200, [])
    client.fetch_page(f"{BASE_URL}/repos/o/r/contributors", page_size=100, include_anonymous=False)
    assert session.get.call_args.kwargs["params"] == {"per_page": 100}


def test_fetch_page_wraps_transport_errors(client, session):
    session.get.side_effect = requests.ConnectionError("connection refused")
    with pytest.raises(PageFetchError, match="connection refused"):
        client.fetch_page(f"{BASE_URL}/repos/o/r/contributors")


def test_client_closes_session(session):
    with ContributorsClient("t", session=session):
        pass
    session.close.assert_called_once()


def test_ensure_usable_reports_api_message():
    page = PageResponse(404, {}, '{"message": "Not Found"}')
    with pytest.raises(PageFetchError) as excinfo:
        ensure_usable(page)
    assert excinfo.value.status_code == 404
    assert excinfo.value.api_message == "Not Found"
    assert "Not Found" in str(excinfo.value)


def test_ensure_usable_without_api_message():
    with pytest.raises(PageFetchError, match="N/A"):
        ensure_usable(PageResponse(502, {}, "<html>bad gateway</html>"))


@pytest.mark.parametrize("body", ["", "   ", "not json", '{"message": "odd"}'])
def test_ensure_usable_rejects_unusable_body(body):
    with pytest.raises(PageFetchError, match="no usable body"):
        ensure_usable(PageResponse(200, {}, body))


def test_ensure_usable_returns_records():
    assert ensure_usable(PageResponse(200, {}, "[]")) == []
    assert ensure_usable(PageResponse(200, {}, '[{"login": "a"}]')) == [{"login": "a"}]
