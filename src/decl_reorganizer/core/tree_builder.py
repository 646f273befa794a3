"""
Builds the declaration tree from a flat list of items
"""

import logging

from decl_reorganizer.core.code_items import DeclarationItem

logger = logging.getLogger(__name__)


class CodeTreeBuilder:
    """Nests a flat item list by span containment"""

    def build(self, code_items: list[DeclarationItem]) -> list[DeclarationItem]:
        """Attach each item to the innermost container enclosing it.

        Only container kinds adopt children. Items with identical spans are
        grouped definitions and stay siblings.

        Returns:
            The root items, in document order
        """
        ordered = sorted(
            enumerate(code_items),
            key=lambda pair: (pair[1].start_offset, -pair[1].end_offset, pair[0]),
        )

        roots: list[DeclarationItem] = []
        stack: list[DeclarationItem] = []
        for _, item in ordered:
            item.children = []
            while stack and not self._encloses(stack[-1], item):
                stack.pop()

            if stack:
                stack[-1].children.append(item)
            else:
                roots.append(item)

            if item.is_container:
                stack.append(item)

        logger.debug(f"Built tree with {len(roots)} root item(s)")
        return roots

    @staticmethod
    def _encloses(parent: DeclarationItem, item: DeclarationItem) -> bool:
        same_span = (parent.start_offset, parent.end_offset) == (
            item.start_offset,
            item.end_offset,
        )
        return (
            not same_span
            and parent.start_offset <= item.start_offset
            and item.end_offset <= parent.end_offset
        )
