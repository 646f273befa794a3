"""
Unit tests for comment helpers
"""

from pathlib import Path

import pytest

from decl_reorganizer.core.comment_helper import (
    CodeLanguage,
    find_comment_start,
    get_code_language,
    get_comment_regex,
    is_comment_line,
    is_region_marker,
    parse_comment_line,
)
from decl_reorganizer.core.text_buffer import TextBuffer


class TestLanguageDetection:
    """Test language lookup by file suffix"""

    @pytest.mark.parametrize(
        "file_name, language",
        [
            ("models.py", CodeLanguage.PYTHON),
            ("stubs.pyi", CodeLanguage.PYTHON),
            ("Program.CS", CodeLanguage.CSHARP),
            ("Module.vb", CodeLanguage.VISUALBASIC),
            ("notes.txt", CodeLanguage.UNKNOWN),
        ],
    )
    def test_get_code_language(self, file_name, language):
        assert get_code_language(Path(file_name)) == language

    def test_unknown_language_has_no_regex(self):
        with pytest.raises(ValueError):
            get_comment_regex(CodeLanguage.UNKNOWN)


class TestCommentParsing:
    """Test splitting comment lines"""

    def test_parse_python_list_comment(self):
        comment = parse_comment_line("    # - item one", CodeLanguage.PYTHON)

        assert comment is not None
        assert comment.prefix == "    #"
        assert comment.list_prefix == "-"
        assert comment.words == ["item", "one"]

    def test_parse_csharp_doc_comment(self):
        comment = parse_comment_line("/// Gets the value.", CodeLanguage.CSHARP)

        assert comment is not None
        assert comment.prefix == "///"
        assert comment.words == ["Gets", "the", "value."]

    def test_parse_keeps_extra_indent(self):
        comment = parse_comment_line("#     indented", CodeLanguage.PYTHON)

        assert comment.indent == "    "

    def test_code_is_not_a_comment(self):
        assert not is_comment_line("x = 1  # trailing", CodeLanguage.PYTHON)
        assert not is_comment_line("int x; // trailing", CodeLanguage.CSHARP)

    def test_comment_in_unknown_language(self):
        assert parse_comment_line("# text", CodeLanguage.UNKNOWN) is None

    @pytest.mark.parametrize(
        "line",
        ["#region Fields", "    # region Fields", "#endregion", "#End Region"],
    )
    def test_region_markers(self, line):
        assert is_region_marker(line)

    def test_plain_comment_is_not_region_marker(self):
        assert not is_region_marker("# regional settings")


class TestFindCommentStart:
    """Test locating the comment block attached above a declaration"""

    def test_attached_comment_block(self):
        buffer = TextBuffer(
            "class A:\n    x = 1\n    # first\n    # second\n    y = 2\n"
        )
        offset = buffer.text.index("y = 2")

        start = find_comment_start(buffer, offset, CodeLanguage.PYTHON)

        assert start == buffer.text.index("# first")

    def test_blank_line_detaches_comment(self):
        buffer = TextBuffer("# header\n\nx = 1\n")
        offset = buffer.text.index("x = 1")

        assert find_comment_start(buffer, offset, CodeLanguage.PYTHON) == offset

    def test_region_marker_ends_block(self):
        buffer = TextBuffer("# region Values\n# about x\nx = 1\n")
        offset = buffer.text.index("x = 1")

        start = find_comment_start(buffer, offset, CodeLanguage.PYTHON)

        assert start == buffer.text.index("# about x")

    def test_different_indent_ends_block(self):
        buffer = TextBuffer("class A:\n# module note\n    # member note\n    x = 1\n")
        offset = buffer.text.index("x = 1")

        start = find_comment_start(buffer, offset, CodeLanguage.PYTHON)

        assert start == buffer.text.index("# member note")

    def test_no_comment_syntax(self):
        buffer = TextBuffer("# looks like a comment\nx = 1\n")
        offset = buffer.text.index("x = 1")

        assert find_comment_start(buffer, offset, CodeLanguage.UNKNOWN) == offset
