"""
HTML to Markdown Conversion

This module converts Substack post bodies to Markdown with markdownify,
running the anchor rewrite rules before markdownify's own link handling.
Posts written as raw HTML pass through untouched.
"""

from typing import Iterable, Optional
import logging

from bs4 import BeautifulSoup
from markdownify import ATX, MarkdownConverter

from .config import SyncConfig
from .errors import ConversionError
from .models import PostDocument
from .rewrite_rules import Matched, RewriteRule, RuleEngine, default_rules


class RuleMarkdownConverter(MarkdownConverter):
    """
    markdownify converter whose anchor handling consults a RuleEngine first.

    If the engine defers, markdownify's default anchor conversion applies.
    """

    def __init__(self, engine: RuleEngine, **options):
        super().__init__(**options)
        self.engine = engine

    def convert_a(self, el, text, *args, **kwargs):
        result = self.engine.apply(el)
        if isinstance(result, Matched):
            return result.fragment
        return super().convert_a(el, text, *args, **kwargs)


class ContentTransformer:
    """
    Applies the rewrite-rule conversion to a post body when the output
    format needs Markdown.
    """

    def __init__(self, config: SyncConfig, rules: Optional[Iterable[RewriteRule]] = None):
        """
        Initialize the transformer.

        Args:
            config: Run configuration (output format and publication prefix)
            rules: Rewrite rules in priority order (defaults to the standard chain)
        """
        self.config = config
        self.logger = logging.getLogger(__name__)
        if rules is None:
            rules = default_rules(config.post_url_prefix())
        self.engine = RuleEngine(rules)
        self.converter = RuleMarkdownConverter(self.engine, heading_style=ATX, bullets='-')

    def to_markdown(self, html: str) -> str:
        """
        Convert an HTML fragment to Markdown.

        Raises:
            ConversionError: If parsing or conversion fails
        """
        try:
            soup = BeautifulSoup(html, 'lxml')
            return self.converter.convert_soup(soup).strip()
        except Exception as e:
            raise ConversionError(f"Markdown conversion failed: {e}") from e

    def transform(self, post: PostDocument) -> PostDocument:
        """
        Replace the post body with its Markdown rendering, in place.

        Does nothing for the html output format.
        """
        if not self.config.needs_markdown:
            return post
        original_size = len(post.body_html)
        post.body_html = self.to_markdown(post.body_html)
        self.logger.debug(f"Converted {post.slug}: {original_size} chars HTML -> {len(post.body_html)} chars Markdown")
        return post
