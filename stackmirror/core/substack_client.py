"""
Substack API Client

This module handles communication with a publication's Substack API: paging
through the reverse-chronological archive listing and fetching individual
posts by slug.
"""

import requests
from typing import Any, Iterator, List, Optional
from datetime import datetime
import logging

from .config import SyncConfig
from .errors import DecodeError, TransportError
from .models import ArchiveEntry, PostDocument


class SubstackClient:
    """
    Client for the Substack v1 API of a single publication.

    Every request carries the session cookie and is followed by a wait on the
    shared throttle.
    """

    USER_AGENT = 'stackmirror/1.0 (Substack archive mirror)'

    def __init__(self, config: SyncConfig, throttle, session: Optional[requests.Session] = None):
        """
        Initialize the API client.

        Args:
            config: Run configuration (publication, cookie, page size, timeout)
            throttle: Object with a wait_for_slot() method shared across the run
            session: Optional pre-built session (tests pass a fake here)
        """
        self.config = config
        self.throttle = throttle
        self.logger = logging.getLogger(__name__)
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({
            'User-Agent': self.USER_AGENT,
            'Accept': 'application/json',
        })

    def iter_archive(self, since: Optional[datetime] = None) -> Iterator[ArchiveEntry]:
        """
        Lazily yield every archive entry published strictly after the cutoff.

        Pages are requested newest first. Paging stops once a page comes back
        short (the listing is exhausted) or once the oldest entry of a full
        page is not after the cutoff, since every later page is older still.

        Args:
            since: Cutoff timestamp (defaults to config.since)

        Raises:
            TransportError: If a page request fails
            DecodeError: If a page payload is malformed
        """
        cutoff = since if since is not None else self.config.since
        limit = self.config.page_size
        offset = 0
        page_count = 0

        while True:
            page = self._fetch_archive_page(offset, limit)
            page_count += 1
            self.throttle.wait_for_slot()

            for entry in page:
                if entry.publish_date > cutoff:
                    yield entry

            # Length is checked before indexing so an empty page can't blow up
            if len(page) < limit:
                self.logger.debug(f"Archive exhausted after {page_count} page(s)")
                break
            if not page[-1].publish_date > cutoff:
                self.logger.debug(f"Reached cutoff {cutoff.date()} after {page_count} page(s)")
                break
            offset += limit

    def fetch_archive(self, since: Optional[datetime] = None) -> List[ArchiveEntry]:
        """
        Fetch all archive entries published after the cutoff.

        Returns:
            Entries in the order the archive listed them (newest first)
        """
        self.logger.info(f"Fetching archive for {self.config.pub_name}")
        entries = list(self.iter_archive(since))
        self.logger.info(f"Found {len(entries)} posts after {(since or self.config.since).date()}")
        return entries

    def fetch_post(self, slug: str) -> PostDocument:
        """
        Fetch one post's full record.

        Args:
            slug: The post slug from the archive listing

        Returns:
            Decoded PostDocument

        Raises:
            TransportError: If the request fails or returns a non-2xx status
            DecodeError: If the payload is not a valid post
        """
        self.logger.debug(f"Fetching post: {slug}")
        data = self.fetch_json(self.config.api_url(f"posts/{slug}"))
        return PostDocument.from_api(data)

    def _fetch_archive_page(self, offset: int, limit: int) -> List[ArchiveEntry]:
        url = self.config.api_url(f"archive?offset={offset}&limit={limit}")
        data = self.fetch_json(url)
        if not isinstance(data, list):
            raise DecodeError(f"expected a JSON array from archive, got {type(data).__name__}")
        return [ArchiveEntry.from_api(item) for item in data]

    def fetch_json(self, url: str) -> Any:
        """
        Make an authenticated GET request and decode the JSON body.

        Args:
            url: Absolute API URL

        Returns:
            Decoded JSON value

        Raises:
            TransportError: On network failure or non-success status
            DecodeError: If the body is not valid JSON
        """
        headers = {'Cookie': f"substack.sid={self.config.cookie}"}
        self.logger.debug(f"GET {url}")

        try:
            response = self.session.get(url, headers=headers, timeout=self.config.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            raise TransportError(f"HTTP {status_code} for {url}", url=url, status_code=status_code) from e
        except requests.RequestException as e:
            raise TransportError(f"Request failed for {url}: {e}", url=url) from e

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Invalid JSON from {url}: {e}") from e

    def close(self):
        """Close the HTTP session."""
        self.session.close()
