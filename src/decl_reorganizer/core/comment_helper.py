"""
Helpers focused around code comments.

Comment syntax is looked up per language family. The helpers only decide
whether a line is a comment and split it into its parts; they are used to
find the comment block attached above a declaration so that moving the
declaration carries its comment along.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path

from decl_reorganizer.core.text_buffer import TextSurface

logger = logging.getLogger(__name__)


class CodeLanguage(Enum):
    """Languages known to the comment and region helpers"""

    CPLUSPLUS = "cpp"
    CSHARP = "csharp"
    CSS = "css"
    FSHARP = "fsharp"
    JAVASCRIPT = "javascript"
    LESS = "less"
    PHP = "php"
    SCSS = "scss"
    TYPESCRIPT = "typescript"
    POWERSHELL = "powershell"
    R = "r"
    PYTHON = "python"
    VISUALBASIC = "visualbasic"
    UNKNOWN = "unknown"


SUFFIX_LANGUAGES: dict[str, CodeLanguage] = {
    ".c": CodeLanguage.CPLUSPLUS,
    ".cc": CodeLanguage.CPLUSPLUS,
    ".cpp": CodeLanguage.CPLUSPLUS,
    ".cxx": CodeLanguage.CPLUSPLUS,
    ".h": CodeLanguage.CPLUSPLUS,
    ".hpp": CodeLanguage.CPLUSPLUS,
    ".cs": CodeLanguage.CSHARP,
    ".css": CodeLanguage.CSS,
    ".fs": CodeLanguage.FSHARP,
    ".fsi": CodeLanguage.FSHARP,
    ".js": CodeLanguage.JAVASCRIPT,
    ".jsx": CodeLanguage.JAVASCRIPT,
    ".less": CodeLanguage.LESS,
    ".php": CodeLanguage.PHP,
    ".scss": CodeLanguage.SCSS,
    ".ts": CodeLanguage.TYPESCRIPT,
    ".tsx": CodeLanguage.TYPESCRIPT,
    ".ps1": CodeLanguage.POWERSHELL,
    ".psm1": CodeLanguage.POWERSHELL,
    ".r": CodeLanguage.R,
    ".py": CodeLanguage.PYTHON,
    ".pyi": CodeLanguage.PYTHON,
    ".vb": CodeLanguage.VISUALBASIC,
}

SLASH_PREFIX = "///?"
HASH_PREFIX = "#+"
TICK_PREFIX = "'+"

COMMENT_PREFIXES: dict[CodeLanguage, str] = {
    CodeLanguage.CPLUSPLUS: SLASH_PREFIX,
    CodeLanguage.CSHARP: SLASH_PREFIX,
    CodeLanguage.CSS: SLASH_PREFIX,
    CodeLanguage.FSHARP: SLASH_PREFIX,
    CodeLanguage.JAVASCRIPT: SLASH_PREFIX,
    CodeLanguage.LESS: SLASH_PREFIX,
    CodeLanguage.PHP: SLASH_PREFIX,
    CodeLanguage.SCSS: SLASH_PREFIX,
    CodeLanguage.TYPESCRIPT: SLASH_PREFIX,
    CodeLanguage.POWERSHELL: HASH_PREFIX,
    CodeLanguage.R: HASH_PREFIX,
    CodeLanguage.PYTHON: HASH_PREFIX,
    CodeLanguage.VISUALBASIC: TICK_PREFIX,
}

# "#region Name" in C-like languages, "# region Name" in hash-comment ones,
# "#Region" / "#End Region" in Visual Basic
REGION_START_PATTERN = re.compile(r"^[\t ]*#[\t ]*region\b(?P<name>.*)$", re.I)
REGION_END_PATTERN = re.compile(r"^[\t ]*#[\t ]*end[\t ]?region\b", re.I)


@dataclass
class CommentLine:
    """A comment line split into its parts"""

    prefix: str
    indent: str
    list_prefix: str | None = None
    words: list[str] = field(default_factory=list)


def get_code_language(path: Path | str) -> CodeLanguage:
    """Determine the language of a file from its suffix"""
    return SUFFIX_LANGUAGES.get(Path(path).suffix.lower(), CodeLanguage.UNKNOWN)


def get_comment_prefix_for_language(language: CodeLanguage) -> str | None:
    """Comment prefix regex for a language, without trailing spaces"""
    return COMMENT_PREFIXES.get(language)


@lru_cache(maxsize=None)
def get_comment_regex(
    language: CodeLanguage,
    include_prefix: bool = True,
) -> re.Pattern:
    """Regex matching one complete comment line.

    Args:
        language: Language whose comment prefix is used
        include_prefix: Match the comment prefix; without it the regex only
            decomposes the text following a prefix

    Raises:
        ValueError: the language has no comment prefix
    """
    prefix = ""
    if include_prefix:
        comment_prefix = get_comment_prefix_for_language(language)
        if comment_prefix is None:
            raise ValueError(f"No comment prefix known for {language.value}")
        # One optional spacer after the prefix; anything beyond is indent
        prefix = rf"(?P<prefix>[\t ]*{comment_prefix})(?P<initialspacer>[ \t]|$)?"

    pattern = (
        rf"^{prefix}(?P<indent>[\t ]*)"
        r"(?P<line>(?P<listprefix>[-=*+]+[ \t]*|\w+[):][ \t]+|\d+\.[ \t]+)?"
        r"(?P<words>[^\r\n]*?))[\t ]*\r?$"
    )
    return re.compile(pattern)


def parse_comment_line(line: str, language: CodeLanguage) -> CommentLine | None:
    """Split a comment line into prefix, indent, list prefix and words"""
    if get_comment_prefix_for_language(language) is None:
        return None
    match = get_comment_regex(language).match(line)
    if not match:
        return None
    list_prefix = match.group("listprefix")
    return CommentLine(
        prefix=match.group("prefix"),
        indent=match.group("indent"),
        list_prefix=list_prefix.strip() if list_prefix else None,
        words=match.group("words").split(),
    )


def is_comment_line(line: str, language: CodeLanguage) -> bool:
    return parse_comment_line(line, language) is not None


def is_region_marker(line: str) -> bool:
    """True for region start/end marker lines"""
    return bool(REGION_START_PATTERN.match(line) or REGION_END_PATTERN.match(line))


def find_comment_start(
    surface: TextSurface,
    offset: int,
    language: CodeLanguage,
) -> int:
    """Find where the comment block attached above a declaration begins.

    Walks upward over consecutive comment lines with the same indentation as
    the declaration's line. Blank lines, code and region markers end the
    block.

    Returns:
        Offset of the first attached comment's text, or offset itself when
        there is none or the language has no comment syntax
    """
    if get_comment_prefix_for_language(language) is None:
        return offset

    declaration_line = surface.get_line(offset)
    declaration_indent = declaration_line[
        : len(declaration_line) - len(declaration_line.lstrip(" \t"))
    ]

    start = offset
    line_start = surface.line_start(offset)
    while line_start > 0:
        previous_start = surface.line_start(line_start - 1)
        line = surface.get_text(previous_start, line_start - 1)
        if is_region_marker(line) or not is_comment_line(line, language):
            break
        indent = line[: len(line) - len(line.lstrip(" \t"))]
        if indent != declaration_indent:
            break
        start = previous_start + len(indent)
        line_start = previous_start
    return start
