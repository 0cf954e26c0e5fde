"""
Records returned by the Substack API.

Only the fields the sync cares about are kept; the API returns many more.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict

from .errors import DecodeError


class Audience(Enum):
    EVERYONE = "everyone"
    PAID_ONLY = "only_paid"

    @classmethod
    def from_api(cls, value: Any) -> "Audience":
        # Anything other than "everyone" is some form of restricted post
        if not value or value == cls.EVERYONE.value:
            return cls.EVERYONE
        return cls.PAID_ONLY


class EntryState(Enum):
    FETCHING = "fetching"
    TRANSFORMING = "transforming"
    WRITING = "writing"
    DONE = "done"
    SKIPPED = "skipped"


def parse_timestamp(value: Any) -> datetime:
    """
    Parse an API timestamp such as "2023-05-15T12:00:00.000Z".

    Naive values are assumed to be UTC.

    Raises:
        DecodeError: If the value is missing or not ISO 8601
    """
    if not isinstance(value, str) or not value.strip():
        raise DecodeError(f"missing or invalid timestamp: {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise DecodeError(f"invalid timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _require_dict(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"expected a JSON object for {what}, got {type(data).__name__}")
    return data


def _text(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _integer(data: Dict[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"field {key!r} is not an integer: {value!r}") from e


@dataclass(frozen=True)
class ArchiveEntry:
    slug: str
    publish_date: datetime
    audience: Audience
    section_slug: str
    section_name: str

    @classmethod
    def from_api(cls, data: Any) -> "ArchiveEntry":
        data = _require_dict(data, "archive entry")
        slug = _text(data, "slug")
        if not slug:
            raise DecodeError("archive entry has no slug")
        return cls(
            slug=slug,
            publish_date=parse_timestamp(data.get("post_date")),
            audience=Audience.from_api(data.get("audience")),
            section_slug=_text(data, "section_slug"),
            section_name=_text(data, "section_name"),
        )


@dataclass
class PostDocument:
    id: int
    publication_id: int
    type: str
    title: str
    subtitle: str
    slug: str
    publish_date: datetime
    canonical_url: str
    description: str
    body_html: str

    @classmethod
    def from_api(cls, data: Any) -> "PostDocument":
        data = _require_dict(data, "post")
        slug = _text(data, "slug")
        if not slug:
            raise DecodeError("post has no slug")
        return cls(
            id=_integer(data, "id"),
            publication_id=_integer(data, "publication_id"),
            type=_text(data, "type"),
            title=_text(data, "title"),
            subtitle=_text(data, "subtitle"),
            slug=slug,
            publish_date=parse_timestamp(data.get("post_date")),
            canonical_url=_text(data, "canonical_url"),
            description=_text(data, "description"),
            body_html=_text(data, "body_html"),
        )


@dataclass(frozen=True)
class OutputArtifact:
    path: Path
    content: str
