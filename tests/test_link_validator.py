"""Tests for docsite.services.link_validator."""

from docsite.models.broken_link import BrokenLink
from docsite.services.link_validator import (
    RenderedPage,
    build_valid_urls,
    collect_link_sources,
    extract_internal_links,
    format_broken_link,
    is_asset_link,
    normalize_link,
    validate_page_links,
    validate_site,
)
from docsite.services.scanner import scan

VALID = {"/", "/about/", "/guides/installation/"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestNormalizeLink:
    def test_adds_trailing_slash(self):
        assert normalize_link("/about") == "/about/"

    def test_drops_query_and_fragment(self):
        assert normalize_link("/about/?tab=1#team") == "/about/"

    def test_keeps_file_extensions(self):
        assert normalize_link("/img/logo.png") == "/img/logo.png"

    def test_decodes_percent_escapes(self):
        assert normalize_link("/a%20b/") == "/a b/"

    def test_asset_links(self):
        assert is_asset_link("/img/logo.png")
        assert is_asset_link("/static/site.css?v=2")
        assert not is_asset_link("/about/")


class TestExtractInternalLinks:
    def test_only_root_relative_links(self):
        html = (
            '<a href="/a/">A</a>'
            '<a href="https://example.com/">X</a>'
            '<a href="//cdn.example.com/x.js">C</a>'
            '<a href="/">Home</a>'
            '<a href="#top">Top</a>'
            '<a href="/#intro">Intro</a>'
            '<a href="relative/">R</a>'
            '<a href="/a/">Again</a>'
        )
        assert extract_internal_links(html) == [("/a/", "A")]

    def test_anchor_without_href_ignored(self):
        assert extract_internal_links('<a name="x">x</a>') == []


class TestBuildValidUrls:
    def test_pages_auto_indexes_and_root(self, make_tree):
        root = make_tree({"about.md": "", "guides/01-installation.md": "", "ref/index.md": ""})
        assert build_valid_urls(scan(root)) == {"/", "/about/", "/guides/", "/guides/installation/", "/ref/"}


# ---------------------------------------------------------------------------
# validate_page_links
# ---------------------------------------------------------------------------

class TestValidatePageLinks:
    def test_valid_links_pass(self):
        html = '<a href="/about/">About</a><a href="/guides/installation">Install</a><a href="/about/#team">Team</a>'
        assert validate_page_links(html, "/", VALID) == []

    def test_asset_links_are_not_checked(self):
        assert validate_page_links('<a href="/files/report.pdf">Report</a>', "/", VALID) == []

    def test_wikilink_source_is_recovered(self):
        markdown = "# Home\n\nSee [[missing]].\n"
        html = '<h1>Home</h1>\n<p>See <a href="/missing/">missing</a>.</p>'
        (broken,) = validate_page_links(html, "/", VALID, source_file="index.md", markdown=markdown)
        assert broken.source_page == "/"
        assert broken.source_file == "index.md"
        assert broken.link_url == "/missing/"
        assert broken.line_number == 3
        assert broken.original_syntax == "[[missing]]"
        assert broken.link_text == "missing"

    def test_markdown_link_source_is_recovered(self):
        markdown = "Intro\n\n[Guide](/gide/)\n"
        html = '<p>Intro</p>\n<p><a href="/gide/">Guide</a></p>'
        (broken,) = validate_page_links(html, "/", VALID, markdown=markdown)
        assert broken.line_number == 3
        assert broken.original_syntax == "[Guide](/gide/)"

    def test_unknown_source_falls_back_to_anchor_text(self):
        (broken,) = validate_page_links('<a href="/nowhere/">Elsewhere</a>', "/x/", VALID)
        assert broken.line_number == 0
        assert broken.original_syntax == ""
        assert broken.link_text == "Elsewhere"

    def test_suggestions_are_attached(self):
        (broken,) = validate_page_links('<a href="/abot/">About</a>', "/", VALID)
        assert broken.suggestions == ["/about/"]

    def test_root_is_never_suggested(self):
        (broken,) = validate_page_links('<a href="/x/">x</a>', "/", VALID)
        assert "/" not in broken.suggestions

    def test_relative_wikilink_recovered(self):
        markdown = "[[Setpu]]\n"
        html = '<p><a href="/guides/setpu/">Setpu</a></p>'
        (broken,) = validate_page_links(html, "/guides/x/", VALID, markdown=markdown, source_dir="/guides/")
        assert broken.original_syntax == "[[Setpu]]"


class TestValidateSite:
    def test_collects_all_pages_in_order(self):
        pages = [
            RenderedPage("/", "index.md", "/", "", '<a href="/one/">1</a>'),
            RenderedPage("/about/", "about.md", "/", "", '<a href="/two/">2</a><a href="/">home</a>'),
        ]
        broken = validate_site(pages, VALID)
        assert [(b.source_page, b.link_url) for b in broken] == [("/", "/one/"), ("/about/", "/two/")]


class TestCollectLinkSources:
    def test_first_occurrence_wins(self):
        sources = collect_link_sources("[[a]]\n[[a|Again]]\n")
        assert sources["/a/"].line_number == 1

    def test_empty_markdown(self):
        assert collect_link_sources("") == {}


class TestFormatBrokenLink:
    def test_full_message(self):
        link = BrokenLink(
            source_page="/",
            source_file="index.md",
            line_number=3,
            link_url="/missing/",
            original_syntax="[[missing]]",
            suggestions=["/mission/"],
        )
        assert format_broken_link(link) == "index.md:3: broken link /missing/ ([[missing]]); did you mean /mission/?"

    def test_minimal_message(self):
        link = BrokenLink(source_page="/about/", link_url="/x/")
        assert format_broken_link(link) == "/about/: broken link /x/"
