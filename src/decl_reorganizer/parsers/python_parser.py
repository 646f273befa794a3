"""
Declaration parser for Python source, based on the ast module.

Python has no access modifiers or field keywords, so they are derived from
conventions:

- Access: ``__name`` is private inside a class, ``_name`` protected inside a
  class and internal at module level, anything else (dunders included) public
- Constants: UPPER_CASE assignment targets
- Read-only: assignments annotated with ``Final``
- Constructors ``__init__``/``__new__``, destructor ``__del__``, properties via
  ``property``-like decorators and accessors, test methods ``test*``
- Attributes: decorator and base class names, which is where Python declares
  that member order matters (``@dataclass``, ``NamedTuple``)
"""

import ast
import logging

from decl_reorganizer.core.code_items import (
    AccessModifier,
    DeclarationItem,
    KindCodeItem,
)
from decl_reorganizer.core.comment_helper import CodeLanguage
from decl_reorganizer.core.document import Document
from decl_reorganizer.core.errors import ParseUnavailable
from decl_reorganizer.core.text_buffer import TextSurface

from .base_parser import DeclarationParser

logger = logging.getLogger(__name__)

ENUM_BASES = {"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"}
INTERFACE_BASES = {"Protocol"}
STRUCT_BASES = {"NamedTuple", "TypedDict"}

PROPERTY_DECORATORS = {"property", "cached_property", "abstractproperty"}
PROPERTY_ACCESSOR_SUFFIXES = (".setter", ".getter", ".deleter")

CONSTRUCTOR_NAMES = {"__init__", "__new__"}
DESTRUCTOR_NAMES = {"__del__"}


def get_dotted_name(node: ast.expr) -> str | None:
    """Dotted name of a Name/Attribute, looking through calls and subscripts"""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        owner = get_dotted_name(node.value)
        return f"{owner}.{node.attr}" if owner else node.attr
    if isinstance(node, ast.Call):
        return get_dotted_name(node.func)
    if isinstance(node, ast.Subscript):
        return get_dotted_name(node.value)
    return None


def get_loaded_names(nodes: list[ast.AST | None]) -> set[str]:
    """Names read by expressions that run when a statement executes"""
    return {
        child.id
        for node in nodes
        if node is not None
        for child in ast.walk(node)
        if isinstance(child, ast.Name) and isinstance(child.ctx, ast.Load)
    }


def get_access_modifier(name: str, in_class: bool) -> AccessModifier:
    if name.startswith("__") and name.endswith("__"):
        return AccessModifier.PUBLIC
    if name.startswith("__") and in_class:
        return AccessModifier.PRIVATE
    if name.startswith("_"):
        return AccessModifier.PROTECTED if in_class else AccessModifier.INTERNAL
    return AccessModifier.PUBLIC


class PythonDeclarationParser(DeclarationParser):
    """Parses Python modules into declaration items"""

    language = CodeLanguage.PYTHON

    def parse(self, document: Document) -> list[DeclarationItem]:
        text = document.buffer.text
        try:
            tree = ast.parse(text, filename=document.name)
        except SyntaxError as e:
            raise ParseUnavailable(f"Syntax error in {document.name}: {e}") from e

        collector = _DeclarationCollector(document.buffer, text)
        collector.collect(tree.body, in_class=False)
        self.logger.debug(
            f"Found {len(collector.items)} declarations in {document.name}"
        )
        return collector.items


class _DeclarationCollector:
    """Walks statement lists and creates items with live spans"""

    def __init__(self, surface: TextSurface, text: str):
        self.surface = surface
        self.lines = text.split("\n")
        self.line_offsets = []
        offset = 0
        for line in self.lines:
            self.line_offsets.append(offset)
            offset += len(line) + 1
        self.items: list[DeclarationItem] = []

    def collect(self, body: list[ast.stmt], in_class: bool) -> None:
        previous_end_line = None
        previous_start = None
        for node in body:
            start = self._statement_start(node)
            # Statements joined by ";" share one definition line
            if node.lineno == previous_end_line:
                start = previous_start
            end = self._offset(node.end_lineno, node.end_col_offset)
            self._collect_statement(node, start, end, in_class)
            previous_end_line = node.end_lineno
            previous_start = start

    def _collect_statement(
        self,
        node: ast.stmt,
        start: int,
        end: int,
        in_class: bool,
    ) -> None:
        if isinstance(node, ast.ClassDef):
            self._add_class(node, start, end, in_class)
        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            self._add_function(node, start, end, in_class)
        elif isinstance(node, ast.Assign):
            names = [n for target in node.targets for n in self._target_names(target)]
            for name in names:
                self._add_field(node, name, start, end, in_class, read_only=False)
        elif isinstance(node, ast.AnnAssign):
            for name in self._target_names(node.target):
                annotation = get_dotted_name(node.annotation) or ""
                read_only = annotation.rsplit(".", 1)[-1] == "Final"
                self._add_field(node, name, start, end, in_class, read_only)
        elif isinstance(node, (ast.Import, ast.ImportFrom)) and not in_class:
            self.items.append(
                DeclarationItem(
                    kind=KindCodeItem.USING_STATEMENT,
                    span=self.surface.create_span(start, end),
                    name=ast.unparse(node),
                )
            )

    def _add_class(
        self,
        node: ast.ClassDef,
        start: int,
        end: int,
        in_class: bool,
    ) -> None:
        bases = [name for name in map(get_dotted_name, node.bases) if name]
        decorators = [
            name for name in map(get_dotted_name, node.decorator_list) if name
        ]
        short_bases = {base.rsplit(".", 1)[-1] for base in bases}

        if short_bases & ENUM_BASES:
            kind = KindCodeItem.ENUM
        elif short_bases & INTERFACE_BASES:
            kind = KindCodeItem.INTERFACE
        elif short_bases & STRUCT_BASES:
            kind = KindCodeItem.STRUCT
        else:
            kind = KindCodeItem.CLASS

        item = DeclarationItem(
            kind=kind,
            span=self.surface.create_span(start, end),
            name=node.name,
            access=get_access_modifier(node.name, in_class),
            attributes=decorators + bases,
            references=get_loaded_names(
                [*node.decorator_list, *node.bases]
                + [keyword.value for keyword in node.keywords]
            ),
        )
        item.add_lazy_value(
            "signature",
            lambda: f"class {node.name}({', '.join(map(ast.unparse, node.bases))})",
        )
        item.add_lazy_value("docstring", lambda: ast.get_docstring(node))
        self.items.append(item)

        self.collect(node.body, in_class=True)

    def _add_function(
        self,
        node: ast.FunctionDef | ast.AsyncFunctionDef,
        start: int,
        end: int,
        in_class: bool,
    ) -> None:
        decorators = [
            name for name in map(get_dotted_name, node.decorator_list) if name
        ]
        item = DeclarationItem(
            kind=self._function_kind(node.name, decorators, in_class),
            span=self.surface.create_span(start, end),
            name=node.name,
            access=get_access_modifier(node.name, in_class),
            attributes=decorators,
            references=get_loaded_names(
                [*node.decorator_list, *node.args.defaults, *node.args.kw_defaults]
            ),
        )
        item.add_lazy_value("signature", lambda: self._function_signature(node))
        item.add_lazy_value("docstring", lambda: ast.get_docstring(node))
        self.items.append(item)

    def _add_field(
        self,
        node: ast.Assign | ast.AnnAssign,
        name: str,
        start: int,
        end: int,
        in_class: bool,
        read_only: bool,
    ) -> None:
        is_constant = name.isupper()
        item = DeclarationItem(
            kind=KindCodeItem.CONSTANTS if is_constant else KindCodeItem.FIELD,
            span=self.surface.create_span(start, end),
            name=name,
            access=get_access_modifier(name, in_class),
            is_constant=is_constant,
            is_read_only=read_only,
            references=get_loaded_names([node.value]),
        )
        item.add_lazy_value("signature", lambda: ast.unparse(node))
        self.items.append(item)

    @staticmethod
    def _function_kind(
        name: str,
        decorators: list[str],
        in_class: bool,
    ) -> KindCodeItem:
        if in_class:
            if name in CONSTRUCTOR_NAMES:
                return KindCodeItem.CONSTRUCTOR
            if name in DESTRUCTOR_NAMES:
                return KindCodeItem.DESTRUCTOR
            if any(
                decorator.rsplit(".", 1)[-1] in PROPERTY_DECORATORS
                or decorator.endswith(PROPERTY_ACCESSOR_SUFFIXES)
                for decorator in decorators
            ):
                return KindCodeItem.PROPERTY
        if name.startswith("test"):
            return KindCodeItem.TEST_METHOD
        return KindCodeItem.METHOD

    @staticmethod
    def _function_signature(node: ast.FunctionDef | ast.AsyncFunctionDef) -> str:
        prefix = "async def" if isinstance(node, ast.AsyncFunctionDef) else "def"
        signature = f"{prefix} {node.name}({ast.unparse(node.args)})"
        if node.returns is not None:
            signature += f" -> {ast.unparse(node.returns)}"
        return signature

    def _target_names(self, target: ast.expr) -> list[str]:
        if isinstance(target, ast.Name):
            return [target.id]
        if isinstance(target, (ast.Tuple, ast.List)):
            return [name for elt in target.elts for name in self._target_names(elt)]
        if isinstance(target, ast.Starred):
            return self._target_names(target.value)
        return []

    def _statement_start(self, node: ast.stmt) -> int:
        """Start of the statement, including its decorators"""
        decorators = getattr(node, "decorator_list", None)
        if decorators:
            line = self.lines[decorators[0].lineno - 1]
            indent = len(line) - len(line.lstrip(" \t"))
            return self.line_offsets[decorators[0].lineno - 1] + indent
        return self._offset(node.lineno, node.col_offset)

    def _offset(self, lineno: int, col_offset: int) -> int:
        """Character offset of an ast position (columns are UTF-8 bytes)"""
        line = self.lines[lineno - 1]
        column = len(line.encode("utf-8")[:col_offset].decode("utf-8", "ignore"))
        return self.line_offsets[lineno - 1] + column
