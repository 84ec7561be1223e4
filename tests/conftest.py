import io
import json
import math
from http import HTTPStatus
from unittest import mock
from urllib.parse import parse_qs, urlencode, urlsplit

import pytest
import requests
from requests.structures import CaseInsensitiveDict
from rich.console import Console

from contributor_stats.client import ContributorsClient
from contributor_stats.console import Reporter

BASE_URL = "https://api.github.com"


def make_response(status_code=200, body=None, headers=None, url=BASE_URL):
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = HTTPStatus(status_code).phrase
    if body is None:
        content = b""
    elif isinstance(body, bytes):
        content = body
    elif isinstance(body, str):
        content = body.encode("utf-8")
    else:
        content = json.dumps(body).encode("utf-8")
    response._content = content
    response.encoding = "utf-8"
    response.headers = CaseInsensitiveDict(headers or {})
    response.url = url
    return response


def contributor(login, contributions=1):
    return {"login": login, "contributions": contributions, "type": "User"}


def anonymous(name, contributions=1):
    return {"name": name, "email": f"{name}@example.com", "contributions": contributions, "type": "Anonymous"}


class FakeContributorsAPI:
    """
    Serves paginated contributor lists the way the GitHub REST API does.

    ``repositories`` maps 'owner/name' to either a list of contributor records
    or a ``(status_code, body)`` tuple returned for every request.
    Unknown repositories answer 404.
    """

    def __init__(self, repositories):
        self.repositories = repositories
        self.calls = []

    def _link_header(self, key, per_page, page, last):
        base = f"{BASE_URL}/repos/{key}/contributors"
        links = []
        if page < last:
            links.append(f'<{base}?per_page={per_page}&anon=1&page={page + 1}>; rel="next"')
            links.append(f'<{base}?per_page={per_page}&anon=1&page={last}>; rel="last"')
        if page > 1:
            links.append(f'<{base}?per_page={per_page}&anon=1&page={page - 1}>; rel="prev"')
            links.append(f'<{base}?per_page={per_page}&anon=1&page=1>; rel="first"')
        return ", ".join(links)

    def __call__(self, url, params=None, timeout=None, allow_redirects=True):
        full_url = f"{url}?{urlencode(params)}" if params else url
        self.calls.append(full_url)

        split = urlsplit(full_url)
        query = parse_qs(split.query)
        parts = split.path.strip("/").split("/")
        key = f"{parts[1]}/{parts[2]}"

        entry = self.repositories.get(key)
        if entry is None:
            return make_response(404, {"message": "Not Found"}, url=full_url)
        if isinstance(entry, tuple):
            status_code, body = entry
            return make_response(status_code, body, url=full_url)

        per_page = int(query.get("per_page", ["30"])[0])
        page = int(query.get("page", ["1"])[0])
        last = max(1, math.ceil(len(entry) / per_page))
        chunk = entry[(page - 1) * per_page:page * per_page]

        link = self._link_header(key, per_page, page, last)
        headers = {"Content-Type": "application/json; charset=utf-8"}
        if link:
            headers["Link"] = link
        return make_response(200, chunk, headers, url=full_url)

    def pages_requested(self, key):
        """Page numbers requested for one repository, in request order."""
        pages = []
        for call in self.calls:
            if f"/repos/{key}/" in call:
                pages.append(int(parse_qs(urlsplit(call).query).get("page", ["1"])[0]))
        return pages


@pytest.fixture
def session():
    """A mocked requests session; set ``session.get.side_effect`` per test."""
    fake = mock.Mock(spec=requests.Session)
    fake.headers = {}
    return fake


@pytest.fixture
def client(session):
    return ContributorsClient("test-token", base_url=BASE_URL, session=session)


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def reporter(output):
    console = Console(file=output, width=200, color_system=None, highlight=False)
    return Reporter(console=console, err_console=console)
