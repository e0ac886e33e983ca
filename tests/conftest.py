import pytest


@pytest.fixture
def make_tree(tmp_path):
    """Create files under a fresh content root and return its path as a string.

    Usage: ``root = make_tree({"index.md": "# Home", "guides/01-intro.md": ""})``
    """

    def _make(files, root_name="content"):
        root = tmp_path / root_name
        root.mkdir(exist_ok=True)
        for rel, content in files.items():
            target = root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")
        return str(root)

    return _make
