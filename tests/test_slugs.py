"""Tests for docsite.services.slugs (path -> URL mapping)."""

import pytest

from docsite.services.slugs import (
    directory_url,
    folder_url,
    output_path_for,
    output_path_for_url,
    slugify_path,
    url_for,
)


class TestUrlFor:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("index.md", "/"),
            ("README.md", "/"),
            ("about.md", "/about/"),
            ("guides/01-installation.md", "/guides/installation/"),
            ("guides/README.md", "/guides/"),
            ("posts/2024-01-15-hello-world.md", "/posts/hello-world/"),
            ("0. Inbox/1. Health.md", "/inbox/health/"),
            ("", "/"),
        ],
    )
    def test_examples(self, path, expected):
        assert url_for(path) == expected

    @pytest.mark.parametrize(
        "path",
        [
            "guides/01-installation.md",
            "index.md",
            "A B/C D.markdown",
            "Index!.md",
            "x/2024-01-01-y",
            "readme/index.md",
            "index/index.md",
            "guides/readme/README.md",
        ],
    )
    def test_idempotent(self, path):
        url = url_for(path)
        assert url_for(url) == url

    def test_shape(self):
        url = url_for("Some Folder/Some Page.md")
        assert url.startswith("/") and url.endswith("/")
        assert "//" not in url

    def test_backslashes_are_separators(self):
        assert url_for("guides\\intro.md") == "/guides/intro/"

    def test_index_named_folder_url_is_kept(self):
        assert url_for("readme/index.md") == "/readme/"
        assert url_for("/readme/") == "/readme/"
        assert url_for("/guides/index/") == "/guides/index/"


class TestFolderUrl:
    def test_root(self):
        assert folder_url("") == "/"

    def test_index_named_folder_keeps_its_segment(self):
        assert folder_url("guides/readme") == "/guides/readme/"
        assert url_for("guides/readme") == "/guides/"

    def test_directory_url(self):
        assert directory_url("guides/intro.md") == "/guides/"
        assert directory_url("index.md") == "/"

    def test_slugify_path(self):
        assert slugify_path("0. Inbox/1. Health") == "inbox/health"


class TestOutputPath:
    def test_page(self):
        assert output_path_for("guides/intro.md") == "guides/intro/index.html"

    def test_root_index(self):
        assert output_path_for("index.md") == "index.html"

    def test_folder_index(self):
        assert output_path_for("guides/index.md") == "guides/index.html"

    def test_from_url(self):
        assert output_path_for_url("/") == "index.html"
        assert output_path_for_url("/a/b/") == "a/b/index.html"
