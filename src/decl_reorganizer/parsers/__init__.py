"""
Declaration parsers by language
"""

from decl_reorganizer.core.comment_helper import CodeLanguage

from .base_parser import DeclarationParser
from .python_parser import PythonDeclarationParser

PARSERS: dict[CodeLanguage, type[DeclarationParser]] = {
    CodeLanguage.PYTHON: PythonDeclarationParser,
}


def get_parser(language: CodeLanguage) -> DeclarationParser | None:
    """Parser instance for a language, None when none is registered"""
    parser_class = PARSERS.get(language)
    return parser_class() if parser_class else None


__all__ = [
    "DeclarationParser",
    "PythonDeclarationParser",
    "PARSERS",
    "get_parser",
]
