"""
Anchor Rewrite Rules

Substack bodies wrap every image in an anchor pointing at its CDN fetch URL,
and link between posts using absolute URLs. These rules turn both into
portable Markdown before the generic converter sees them.

Each rule either returns Matched(fragment) or DEFERRED. Rules are tried in
order and the first match wins; if every rule defers, the converter falls back
to its default anchor handling.
"""

from __future__ import annotations

import re
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union
from urllib.parse import unquote_plus

from bs4 import Tag


IMAGE_LINK_CLASS = "image-link"
ENCODED_URL_MARKER = "https%3A%2F%2F"
LEGACY_BUCKET = "bucketeer-e05bbc84-baa3-437e-9518-adb32be77984"
CURRENT_BUCKET = "substack-post-media"

_BAD_ESCAPE = re.compile(r'%(?![0-9A-Fa-f]{2})')


@dataclass(frozen=True)
class Matched:
    fragment: str


class Deferred:
    def __repr__(self) -> str:
        return "DEFERRED"


DEFERRED = Deferred()

RuleResult = Union[Matched, Deferred]


def usable_href(node: Tag) -> Optional[str]:
    """Return the anchor's href, or None if it is missing, blank or just '#'."""
    href = node.get('href')
    if href is None:
        return None
    stripped = href.strip()
    if not stripped or stripped == '#':
        return None
    return href


class RewriteRule:
    """Base class: a predicate plus a rewrite that may still defer."""

    name = "rule"

    def applies_to(self, node: Tag) -> bool:
        return True

    def rewrite(self, node: Tag) -> RuleResult:
        raise NotImplementedError

    def apply(self, node: Tag) -> RuleResult:
        if not self.applies_to(node):
            return DEFERRED
        return self.rewrite(node)


class ImageLinkRule(RewriteRule):
    """
    Turn an `image-link` anchor into a Markdown image.

    The href looks like
    https://substackcdn.com/image/fetch/f_auto,q_auto:good/https%3A%2F%2Fsubstack-post-media.s3.amazonaws.com%2Fpublic%2Fimages%2Fx.png
    and the original asset URL is the percent-encoded tail.
    """

    name = "image-link"

    def __init__(self, legacy_bucket: str = LEGACY_BUCKET, current_bucket: str = CURRENT_BUCKET):
        self.legacy_bucket = legacy_bucket
        self.current_bucket = current_bucket

    def applies_to(self, node: Tag) -> bool:
        return IMAGE_LINK_CLASS in (node.get('class') or [])

    def rewrite(self, node: Tag) -> RuleResult:
        href = usable_href(node)
        if href is None:
            return DEFERRED

        idx = href.find(ENCODED_URL_MARKER)
        if idx == -1:
            return DEFERRED

        encoded = href[idx:]
        if _BAD_ESCAPE.search(encoded):
            return DEFERRED

        asset_url = unquote_plus(encoded)
        # Old uploads still point at the pre-migration bucket
        asset_url = asset_url.replace(self.legacy_bucket, self.current_bucket)
        return Matched(f"![]({asset_url})")


class InternalLinkRule(RewriteRule):
    """Rewrite links to this publication's own posts as relative slug links."""

    name = "internal-link"

    def __init__(self, post_url_prefix: str):
        """
        Args:
            post_url_prefix: e.g. "https://acme.substack.com/p/"
        """
        self.post_url_prefix = post_url_prefix

    def rewrite(self, node: Tag) -> RuleResult:
        href = usable_href(node)
        if href is None:
            return DEFERRED
        if not href.startswith(self.post_url_prefix):
            return DEFERRED
        remainder = href[len(self.post_url_prefix):]
        return Matched(f"[{node.get_text()}]({remainder})")


class RuleEngine:
    """Ordered chain of rewrite rules; first Matched wins."""

    def __init__(self, rules: Iterable[RewriteRule]):
        self.rules: List[RewriteRule] = list(rules)
        self.logger = logging.getLogger(__name__)

    def apply(self, node: Tag) -> RuleResult:
        for rule in self.rules:
            result = rule.apply(node)
            if isinstance(result, Matched):
                self.logger.debug(f"{rule.name} rewrote anchor -> {result.fragment}")
                return result
        return DEFERRED


def default_rules(post_url_prefix: str) -> List[RewriteRule]:
    """The standard chain. Image links go first so they are never read as post links."""
    return [ImageLinkRule(), InternalLinkRule(post_url_prefix)]
