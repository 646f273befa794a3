"""
Blank line policy and padding between declarations
"""

import logging
from collections.abc import Iterable

from decl_reorganizer.core.code_items import DeclarationItem, KindCodeItem
from decl_reorganizer.core.comment_helper import CodeLanguage, find_comment_start
from decl_reorganizer.core.text_buffer import TextSurface

logger = logging.getLogger(__name__)

DEFAULT_PADDED_KINDS = frozenset(
    {
        KindCodeItem.CONSTRUCTOR,
        KindCodeItem.METHOD,
        KindCodeItem.TEST_METHOD,
        KindCodeItem.PROPERTY,
        KindCodeItem.DESTRUCTOR,
        KindCodeItem.CLASS,
        KindCodeItem.STRUCT,
        KindCodeItem.INTERFACE,
        KindCodeItem.ENUM,
        KindCodeItem.NAMESPACE,
    }
)


class BlankLinePolicy:
    """Decides which declarations want to be set apart by blank lines"""

    def __init__(self, padded_kinds: Iterable[KindCodeItem] | None = None):
        self.padded_kinds = (
            frozenset(padded_kinds)
            if padded_kinds is not None
            else DEFAULT_PADDED_KINDS
        )

    def wants_leading_blank_line(self, item: DeclarationItem) -> bool:
        return item.kind in self.padded_kinds

    def wants_trailing_blank_line(self, item: DeclarationItem) -> bool:
        return item.kind in self.padded_kinds


class BlankLineInsertService:
    """Tops up blank lines between sibling declarations that want them"""

    def __init__(
        self,
        surface: TextSurface,
        policy: BlankLinePolicy | None = None,
        language: CodeLanguage = CodeLanguage.UNKNOWN,
        blank_lines: int = 1,
        top_level_blank_lines: int = 1,
    ):
        self.surface = surface
        self.policy = policy or BlankLinePolicy()
        self.language = language
        self.blank_lines = blank_lines
        self.top_level_blank_lines = top_level_blank_lines

    def insert_paddings(self, items: list[DeclarationItem], depth: int = 0) -> int:
        """Insert missing blank lines between siblings, recursively.

        Returns:
            Number of blank lines inserted
        """
        required = self.top_level_blank_lines if depth == 0 else self.blank_lines
        siblings = self._distinct_elements(items)
        inserted = 0

        for previous, current in zip(siblings, siblings[1:]):
            if not (
                self.policy.wants_trailing_blank_line(previous)
                or self.policy.wants_leading_blank_line(current)
            ):
                continue
            block_start = self.surface.line_start(
                find_comment_start(self.surface, current.start_offset, self.language)
            )
            # Declarations sharing a line cannot be padded
            if block_start <= previous.end_offset:
                continue
            missing = required - self._blank_lines_above(block_start, previous)
            if missing > 0:
                self.surface.insert_text(block_start, "\n" * missing)
                inserted += missing
                logger.debug(f"Inserted {missing} blank line(s) before {current.name}")

        for item in siblings:
            if item.children:
                inserted += self.insert_paddings(item.children, depth + 1)
        return inserted

    def _blank_lines_above(self, block_start: int, previous: DeclarationItem) -> int:
        """Count the blank lines directly above block_start, below previous"""
        surface = self.surface
        limit = surface.line_end(previous.end_offset)
        position = block_start
        count = 0
        while position > limit + 1:
            position = surface.line_start(position - 1)
            if surface.get_line(position).strip():
                break
            count += 1
        return count

    @staticmethod
    def _distinct_elements(items: list[DeclarationItem]) -> list[DeclarationItem]:
        seen: set[int] = set()
        result = []
        for item in sorted(
            (i for i in items if i.is_element), key=lambda i: i.start_offset
        ):
            if item.start_offset not in seen:
                seen.add(item.start_offset)
                result.append(item)
        return result
