"""
Shared fakes for network-free tests.

FakeSession stands in for requests.Session and serves canned JSON per URL.
"""

from datetime import datetime, timedelta, timezone

import pytest
import requests

from stackmirror.core.config import SyncConfig
from stackmirror.utils.rate_limiter import NoDelayThrottle


INVALID_JSON = object()


class FakeResponse:
    def __init__(self, data, status_code=200):
        self._data = data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self._data is INVALID_JSON:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._data


class FakeSession:
    """
    Routes map absolute URLs to a JSON payload, a (status, payload) tuple,
    or an exception instance to raise.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.headers = {}
        self.requests = []
        self.closed = False

    def get(self, url, headers=None, timeout=None):
        self.requests.append({'url': url, 'headers': dict(headers or {}), 'timeout': timeout})
        if url not in self.routes:
            return FakeResponse({"error": "not found"}, status_code=404)
        route = self.routes[url]
        if isinstance(route, Exception):
            raise route
        if isinstance(route, tuple):
            status, data = route
            return FakeResponse(data, status_code=status)
        return FakeResponse(route)

    def archive_requests(self):
        return [r['url'] for r in self.requests if '/api/v1/archive' in r['url']]

    def close(self):
        self.closed = True


def entry_json(slug, post_date, section="news", audience="everyone"):
    return {
        "slug": slug,
        "post_date": post_date,
        "audience": audience,
        "section_slug": section,
        "section_name": section.title(),
    }


def post_json(slug, post_date, title="Title", subtitle="Subtitle", body="<p>Body</p>"):
    return {
        "id": 1000 + len(slug),
        "publication_id": 42,
        "type": "newsletter",
        "title": title,
        "subtitle": subtitle,
        "slug": slug,
        "post_date": post_date,
        "canonical_url": f"https://acme.substack.com/p/{slug}",
        "description": "",
        "body_html": body,
    }


def descending_entries(count, newest=datetime(2024, 6, 1, tzinfo=timezone.utc), step_hours=24):
    """Archive entries newest first, one every step_hours."""
    entries = []
    for i in range(count):
        when = newest - timedelta(hours=step_hours * i)
        entries.append(entry_json(f"post-{i:03d}", when.strftime('%Y-%m-%dT%H:%M:%S.000Z')))
    return entries


def archive_routes(config, entries, page_size=None):
    """Serve `entries` as an offset/limit paged archive, including trailing empty pages."""
    limit = page_size or config.page_size
    routes = {}
    offset = 0
    while offset <= len(entries) + limit:
        url = config.api_url(f"archive?offset={offset}&limit={limit}")
        routes[url] = entries[offset:offset + limit]
        offset += limit
    return routes


@pytest.fixture
def config(tmp_path):
    return SyncConfig(pub_name="acme", cookie="abc123", output_format="md",
                      dest_folder=str(tmp_path / "out"), request_delay=0.0)


@pytest.fixture
def throttle():
    return NoDelayThrottle()
