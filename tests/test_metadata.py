"""Tests for docsite.services.metadata: prefixes, slugs, labels and index names."""

from datetime import date, datetime, timezone

import pytest

from docsite.models.metadata import PrefixKind
from docsite.services.metadata import (
    classify_prefix,
    clean_label,
    extract_metadata,
    is_index_name,
    is_markup_file,
    slugify,
    strip_markup_extension,
    strip_prefixes,
)


# ---------------------------------------------------------------------------
# extract_metadata
# ---------------------------------------------------------------------------

class TestExtractMetadata:
    def test_date_prefixed_file(self):
        meta = extract_metadata("2024-01-15-hello-world.md")
        assert meta.prefix is PrefixKind.DATE
        assert meta.prefix_date == date(2024, 1, 15)
        assert meta.prefix_number is None
        assert meta.slug == "hello-world"
        assert meta.display_name == "Hello World"

    def test_date_with_underscores_and_space(self):
        assert extract_metadata("2024_03_01_release.md").prefix_date == date(2024, 3, 1)
        assert extract_metadata("2024-03-01 Release Notes.md").slug == "release-notes"

    def test_number_prefixed_file(self):
        meta = extract_metadata("01-installation.md")
        assert meta.prefix is PrefixKind.NUMBER
        assert meta.prefix_number == 1
        assert meta.slug == "installation"
        assert meta.display_name == "Installation"

    def test_dotted_number_folder(self):
        meta = extract_metadata("0. Inbox")
        assert meta.prefix is PrefixKind.NUMBER
        assert meta.prefix_number == 0
        assert meta.slug == "inbox"

    def test_plain_file(self):
        meta = extract_metadata("getting-started.md")
        assert meta.prefix is PrefixKind.PLAIN
        assert meta.order_key is None
        assert meta.slug == "getting-started"
        assert meta.display_name == "Getting Started"

    def test_invalid_date_falls_back_to_number(self):
        meta = extract_metadata("2024-13-45-bad.md")
        assert meta.prefix is PrefixKind.NUMBER
        assert meta.prefix_number == 2024
        assert meta.slug == "bad"

    def test_draft_marker_is_ignored_for_prefixes(self):
        meta = extract_metadata("_02-notes.md")
        assert meta.is_draft is True
        assert meta.prefix_number == 2
        assert meta.slug == "notes"

    def test_modified_is_carried_through(self):
        stamp = datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert extract_metadata("a.md", stamp).modified == stamp

    def test_order_key_matches_prefix(self):
        assert extract_metadata("03-x.md").order_key == 3
        assert extract_metadata("2020-02-02-x.md").order_key == date(2020, 2, 2)

    def test_never_raises_on_odd_names(self):
        for name in ("", ".md", "---", "!!!.md", "2024-", "  "):
            extract_metadata(name)


# ---------------------------------------------------------------------------
# classify_prefix / strip_prefixes
# ---------------------------------------------------------------------------

class TestPrefixes:
    def test_classify_returns_remainder(self):
        assert classify_prefix("10_Advanced") == (PrefixKind.NUMBER, 10, "Advanced")

    def test_classify_plain(self):
        assert classify_prefix("Advanced") == (PrefixKind.PLAIN, None, "Advanced")

    def test_bare_number_is_not_a_prefix(self):
        assert classify_prefix("404")[0] is PrefixKind.PLAIN

    def test_strip_prefixes_repeats(self):
        assert strip_prefixes("01-2024-01-15-notes") == "notes"

    def test_year_like_prefix_is_stripped(self):
        assert slugify("2023 Goals") == "goals"


# ---------------------------------------------------------------------------
# slugify
# ---------------------------------------------------------------------------

class TestSlugify:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Hello World", "hello-world"),
            ("0. Inbox", "inbox"),
            ("2024-01-15-Hello World", "hello-world"),
            ("my_cool__page", "my-cool-page"),
            ("Héllo Wörld", "hello-world"),
            ("What's New?", "whats-new"),
            ("--trim--me--", "trim-me"),
            ("!!!", ""),
        ],
    )
    def test_examples(self, name, expected):
        assert slugify(name) == expected

    @pytest.mark.parametrize(
        "name",
        ["(01) intro", "0. Inbox", "A  -  B", "ÄÖÜ 12-3", "_draft", "x-01-y", "99. 01 - Title"],
    )
    def test_idempotent(self, name):
        once = slugify(name)
        assert slugify(once) == once

    def test_output_charset(self):
        slug = slugify("Ünïcödé / Stuff & Things #1")
        assert all(c.isdigit() or c == "-" or "a" <= c <= "z" for c in slug)


# ---------------------------------------------------------------------------
# Filename helpers
# ---------------------------------------------------------------------------

class TestFilenameHelpers:
    def test_strip_markup_extension(self):
        assert strip_markup_extension("guide.md") == "guide"
        assert strip_markup_extension("guide.MARKDOWN") == "guide"
        assert strip_markup_extension("v1.2") == "v1.2"
        assert strip_markup_extension("0. Inbox") == "0. Inbox"

    def test_is_markup_file(self):
        assert is_markup_file("notes.md")
        assert is_markup_file("Notes.Markdown")
        assert not is_markup_file("logo.png")
        assert not is_markup_file(".md")

    @pytest.mark.parametrize("name", ["index.md", "README.md", "Index.MD", "readme.markdown", "01-index.md"])
    def test_index_names(self, name):
        assert is_index_name(name)

    @pytest.mark.parametrize("name", ["indexes.md", "read-me-later.md", "about.md"])
    def test_non_index_names(self, name):
        assert not is_index_name(name)


class TestCleanLabel:
    def test_hyphens_become_spaces(self):
        assert clean_label("getting-started.md") == "Getting Started"

    def test_prefix_is_removed(self):
        assert clean_label("01-introduction.md") == "Introduction"

    def test_underscores_and_acronyms(self):
        assert clean_label("my_FAQ_page.md") == "My FAQ Page"
        assert clean_label("FAQ.md") == "FAQ"

    def test_extra_spaces_collapse(self):
        assert clean_label("a -- b.md") == "A B"
