"""Tests for docsite.services.suggestions."""

from docsite.services.suggestions import MAX_SUGGESTIONS, similarity, suggest_urls


class TestSimilarity:
    def test_identical(self):
        assert similarity("/about/", "/about/") == 1.0

    def test_root_scores_zero(self):
        assert similarity("/", "/about/") == 0.0

    def test_ignores_fragment_and_case(self):
        assert similarity("/About/#team", "/about/") == 1.0

    def test_last_segment_match_in_other_folder(self):
        assert similarity("/old/installation/", "/guides/installation/") == 1.0


class TestSuggestUrls:
    def test_typo_finds_page(self):
        urls = ["/getting-started/", "/about/", "/api/reference/"]
        assert suggest_urls("/gettting-started/", urls) == ["/getting-started/"]

    def test_nothing_close_returns_empty(self):
        assert suggest_urls("/zzz/", ["/getting-started/", "/about/"]) == []

    def test_limit_and_tie_order(self):
        urls = ["/guide-d/", "/guide-b/", "/guide-a/", "/guide-c/"]
        result = suggest_urls("/guide-x/", urls)
        assert len(result) == MAX_SUGGESTIONS
        assert result == ["/guide-a/", "/guide-b/", "/guide-c/"]

    def test_best_first(self):
        result = suggest_urls("/instalation/", ["/installing/", "/installation/"])
        assert result[0] == "/installation/"

    def test_custom_threshold(self):
        assert suggest_urls("/abc/", ["/xyz/"], threshold=0.0) == ["/xyz/"]
