"""
Run configuration for a single archive sync.

The configuration is built once (by the CLI or by a test) and handed to every
component explicitly; nothing mutates it after construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from .errors import ArgumentError


OUTPUT_FORMATS = ("html", "md")
DEFAULT_HOST = "substack.com"
DEFAULT_PAGE_SIZE = 50
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_since(value: str) -> datetime:
    """
    Parse a YYYY-MM-DD cutoff date.

    Args:
        value: Date string from the command line

    Returns:
        Midnight UTC of that day

    Raises:
        ArgumentError: If the string is not a valid date
    """
    try:
        parsed = datetime.strptime(value.strip(), "%Y-%m-%d")
    except (ValueError, AttributeError) as e:
        raise ArgumentError(f"error parsing since date {value!r}: expected YYYY-MM-DD") from e
    return parsed.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class SyncConfig:
    pub_name: str
    cookie: str = ""
    output_format: str = "html"  # html | md
    dest_folder: str = "."
    since: datetime = field(default=EPOCH)
    host: str = DEFAULT_HOST
    page_size: int = DEFAULT_PAGE_SIZE
    request_delay: float = 1.0
    timeout: float = 30.0

    def validate(self) -> "SyncConfig":
        """Raise ArgumentError if any field is unusable; return self otherwise."""
        if not self.pub_name or not self.pub_name.strip():
            raise ArgumentError("missing required publication name")
        if self.output_format not in OUTPUT_FORMATS:
            raise ArgumentError(f"invalid output type: {self.output_format}")
        if self.page_size < 1:
            raise ArgumentError(f"page size must be at least 1, got {self.page_size}")
        if self.request_delay < 0:
            raise ArgumentError(f"request delay cannot be negative, got {self.request_delay}")
        if self.timeout <= 0:
            raise ArgumentError(f"timeout must be positive, got {self.timeout}")
        if self.since.tzinfo is None:
            raise ArgumentError("since must be timezone-aware")
        return self

    @property
    def base_url(self) -> str:
        return f"https://{self.pub_name}.{self.host}"

    def api_url(self, path: str) -> str:
        return f"{self.base_url}/api/v1/{path}"

    def post_url_prefix(self) -> str:
        """Canonical prefix of this publication's own post URLs."""
        return f"{self.base_url}/p/"

    @property
    def needs_markdown(self) -> bool:
        return self.output_format == "md"
