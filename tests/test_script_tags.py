from __future__ import annotations

from workinfo.domain.script_tags import SAFE_ATTRIBUTES, ScriptTag, extract_safe_attributes, extract_script_tag


def test_extract_self_closing_tag():
    tag = extract_script_tag('<script src="https://plausible.io/js/script.js" />')
    assert tag is not None
    assert tag.source == "https://plausible.io/js/script.js"


def test_extract_rejects_unclosed_tags():
    assert extract_script_tag('<script src="https://plausible.io/js/script.js" data-domain="x.com">') is None
    assert extract_script_tag('<script src="https://plausible.io/js/script.js">window.x = 1;') is None
    assert extract_script_tag('<p>a</p><script src="https://plausible.io/js/script.js"') is None


def test_extract_end_tag_must_follow_the_start_tag():
    raw = '<!-- </script> --><script src="https://plausible.io/js/script.js">'
    assert extract_script_tag(raw) is None


def test_extract_closing_tag_is_case_insensitive():
    tag = extract_script_tag('<p>x</p>\n  <script src="https://plausible.io/js/script.js"></SCRIPT >')
    assert tag is not None


def test_extract_tag_with_inline_content():
    tag = extract_script_tag('<script async src="https://cloud.umami.is/s.js">window.x = "<b>";</script>')
    assert tag is not None
    assert tag.has("async")
    assert tag.get("async") == ""


def test_extract_ignores_surrounding_markup():
    raw = '<!-- Umami -->\n<p>copy me</p><script src="https://cloud.umami.is/s.js"></script>\n'
    tag = extract_script_tag(raw)
    assert tag is not None
    assert tag.source == "https://cloud.umami.is/s.js"


def test_extract_rejects_multiple_tags_even_nested_in_other_markup():
    raw = '<div><script src="https://a.plausible.io/1.js"></script></div><span><script></script></span>'
    assert extract_script_tag(raw) is None


def test_safe_attributes_keep_values_and_bare_booleans():
    tag = ScriptTag(
        attributes=(
            ("src", "https://plausible.io/js/script.js"),
            ("defer", ""),
            ("async", "async"),
            ("crossorigin", "anonymous"),
            ("integrity", "sha384-abc"),
            ("type", ""),
            ("data-exclude", "/admin/*"),
            ("onload", "x()"),
        )
    )
    assert extract_safe_attributes(tag) == {
        "defer": True,
        "async": "async",
        "crossorigin": "anonymous",
        "integrity": "sha384-abc",
        "data-exclude": "/admin/*",
    }


def test_safe_attribute_set_is_fixed():
    assert set(SAFE_ATTRIBUTES) == {
        "defer",
        "async",
        "type",
        "crossorigin",
        "integrity",
        "data-website-id",
        "data-domain",
        "data-api",
        "data-exclude",
        "data-include",
        "data-host-url",
        "data-track-localhost",
    }
