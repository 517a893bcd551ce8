"""Tests for namespace description resolution"""

from toolbridge.prompts import PromptLibrary, identity_resolver


class TestIdentityResolver:
    def test_returns_text(self):
        assert identity_resolver("Tools for X") == "Tools for X"


class TestPromptLibrary:
    """Tests for PromptLibrary"""

    def test_plain_text_unchanged(self):
        library = PromptLibrary({"a": "stored"})
        assert library("Just a description") == "Just a description"

    def test_key_reference(self):
        library = PromptLibrary({"github": "GitHub repository tools"})
        assert library("[github]") == "GitHub repository tools"
        assert library("  [github] ") == "GitHub repository tools"

    def test_unknown_key_kept(self):
        assert PromptLibrary()("[nope]") == "[nope]"

    def test_empty_text(self):
        assert PromptLibrary().resolve("") == ""

    def test_brackets_inside_text_not_resolved(self):
        library = PromptLibrary({"x": "stored"})
        assert library("see [x] for details") == "see [x] for details"

    def test_directory_lookup(self, tmp_path):
        (tmp_path / "search.md").write_text("Search tools\n", encoding="utf-8")
        (tmp_path / "files.txt").write_text("File tools", encoding="utf-8")
        library = PromptLibrary(prompts_dir=tmp_path)

        assert library("[search]") == "Search tools"
        assert library("[files]") == "File tools"
        assert library("[missing]") == "[missing]"

    def test_mapping_takes_precedence(self, tmp_path):
        (tmp_path / "search.md").write_text("from file", encoding="utf-8")
        library = PromptLibrary({"search": "from mapping"}, prompts_dir=tmp_path)
        assert library.get("search") == "from mapping"
