"""
Focused tests for anchor rewrite rules.
"""

from bs4 import BeautifulSoup

from stackmirror.core.rewrite_rules import (
    Deferred,
    ImageLinkRule,
    InternalLinkRule,
    Matched,
    RuleEngine,
    default_rules,
)


PREFIX = "https://acme.substack.com/p/"


def anchor(html):
    return BeautifulSoup(html, 'lxml').a


def test_image_link_decodes_and_replaces_legacy_bucket():
    node = anchor('<a class="image-link" href="https://cdn.example/fetch/params/'
                  'https%3A%2F%2Fbucketeer-OLD%2Fpublic%2Fx.png"><img src="thumb.png"></a>')
    result = ImageLinkRule(legacy_bucket="bucketeer-OLD").apply(node)
    assert result == Matched("![](https://substack-post-media/public/x.png)")


def test_image_link_default_legacy_bucket():
    node = anchor('<a class="image-link image2 is-viewable-img" href="https://substackcdn.com/image/fetch/'
                  'f_auto,q_auto:good,fl_progressive:steep/https%3A%2F%2Fbucketeer-e05bbc84-baa3-437e-9518-'
                  'adb32be77984.s3.amazonaws.com%2Fpublic%2Fimages%2Fabc_990x598.png"></a>')
    result = ImageLinkRule().apply(node)
    assert result == Matched("![](https://substack-post-media.s3.amazonaws.com/public/images/abc_990x598.png)")


def test_image_link_keeps_current_bucket_urls():
    node = anchor('<a class="image-link" href="https://substackcdn.com/image/fetch/w_1456/'
                  'https%3A%2F%2Fsubstack-post-media.s3.amazonaws.com%2Fpublic%2Fimages%2Fa.jpeg"></a>')
    result = ImageLinkRule().apply(node)
    assert result == Matched("![](https://substack-post-media.s3.amazonaws.com/public/images/a.jpeg)")


def test_image_link_defers_without_marker_class():
    node = anchor('<a href="https://cdn.example/fetch/https%3A%2F%2Fbucket%2Fx.png">x</a>')
    assert isinstance(ImageLinkRule().apply(node), Deferred)


def test_image_link_defers_on_unusable_href():
    for html in ('<a class="image-link">x</a>',
                 '<a class="image-link" href="">x</a>',
                 '<a class="image-link" href=" # ">x</a>',
                 '<a class="image-link" href="https://cdn.example/plain.png">x</a>',
                 '<a class="image-link" href="https://cdn.example/https%3A%2F%2Fbad%ZZescape">x</a>'):
        assert isinstance(ImageLinkRule().apply(anchor(html)), Deferred), html


def test_internal_link_becomes_relative():
    node = anchor(f'<a href="{PREFIX}my-post">Read more</a>')
    assert InternalLinkRule(PREFIX).apply(node) == Matched("[Read more](my-post)")


def test_internal_link_defers_for_other_hosts():
    for html in ('<a href="https://example.org/p/my-post">Elsewhere</a>',
                 '<a href="https://other.substack.com/p/my-post">Other pub</a>',
                 '<a href="#">Top</a>',
                 '<a>No href</a>'):
        assert isinstance(InternalLinkRule(PREFIX).apply(anchor(html)), Deferred), html


def test_image_rule_runs_before_internal_rule():
    node = anchor(f'<a class="image-link" href="{PREFIX}https%3A%2F%2Fsubstack-post-media%2Fa.png">x</a>')

    assert RuleEngine(default_rules(PREFIX)).apply(node) == Matched("![](https://substack-post-media/a.png)")
    # Reversed order would have treated it as a post link
    reversed_engine = RuleEngine([InternalLinkRule(PREFIX), ImageLinkRule()])
    assert reversed_engine.apply(node) == Matched("[x](https%3A%2F%2Fsubstack-post-media%2Fa.png)")


def test_engine_falls_through_to_later_rules():
    # image-link class but no encoded URL: first rule defers, second one matches
    node = anchor(f'<a class="image-link" href="{PREFIX}some-post">Some post</a>')
    assert RuleEngine(default_rules(PREFIX)).apply(node) == Matched("[Some post](some-post)")


def test_engine_defers_when_no_rule_matches():
    node = anchor('<a href="https://example.org/">Example</a>')
    assert isinstance(RuleEngine(default_rules(PREFIX)).apply(node), Deferred)
    assert isinstance(RuleEngine([]).apply(node), Deferred)
