"""
Reorganization of declaration items.

The reorganizer computes the desired order of each level of sibling
declarations and physically moves text in the surface until the document
matches it. Every move is a cut of the item (with its attached comments and
grouped definitions) followed by a paste above the item currently occupying
the target slot. Containers are normalized before they are moved, so a moved
parent always carries an already sorted body.
"""

import logging
from collections.abc import Iterable

from decl_reorganizer.core.blank_lines import BlankLinePolicy
from decl_reorganizer.core.code_items import DeclarationItem, KindCodeItem
from decl_reorganizer.core.comment_helper import CodeLanguage, find_comment_start
from decl_reorganizer.core.item_comparer import CodeItemTypeComparer
from decl_reorganizer.core.text_buffer import TextSpan, TextSurface

logger = logging.getLogger(__name__)

# Member order is significant for COM interop and explicit memory layout
ORDER_SIGNIFICANT_ATTRIBUTES = frozenset(
    {
        "System.Runtime.InteropServices.ComImportAttribute",
        "System.Runtime.InteropServices.StructLayoutAttribute",
    }
)


def _short_attribute_name(name: str) -> str:
    short = name.rsplit(".", 1)[-1]
    if short.endswith("Attribute") and short != "Attribute":
        short = short[: -len("Attribute")]
    return short


def attribute_matches(attribute: str, denied: str) -> bool:
    """Match attribute names written fully qualified, short or suffix-less.

    Two qualified names must match exactly; as soon as one side is
    unqualified only the short names are compared.
    """
    if attribute == denied:
        return True
    if "." in attribute and "." in denied:
        return False
    return _short_attribute_name(attribute) == _short_attribute_name(denied)


class CodeItemReorganizer:
    """Moves declarations in a text surface into their desired order"""

    def __init__(
        self,
        surface: TextSurface,
        comparer: CodeItemTypeComparer | None = None,
        blank_line_policy: BlankLinePolicy | None = None,
        language: CodeLanguage = CodeLanguage.UNKNOWN,
        order_significant_attributes: Iterable[str] | None = None,
    ):
        """
        Args:
            surface: Text surface holding the document
            comparer: Ordering policy, defaults to rank-only ordering
            blank_line_policy: Decides when moved blocks get a blank line
            language: Document language, used to find attached comments
            order_significant_attributes: Attributes that freeze the order of
                a container's children, added to the built-in ones
        """
        self.surface = surface
        self.comparer = comparer or CodeItemTypeComparer()
        self.blank_line_policy = blank_line_policy or BlankLinePolicy()
        self.language = language
        self.order_significant_attributes = ORDER_SIGNIFICANT_ATTRIBUTES | frozenset(
            order_significant_attributes or ()
        )
        self.moves_performed = 0

    def reorganize(self, code_items: list[DeclarationItem]) -> None:
        """Reorder one level of sibling declarations, recursing into children"""
        if not code_items:
            return

        current_order = self.get_reorganizable_elements(code_items)
        desired_order = self.keep_definition_dependencies(
            self.comparer.sort(current_order), code_items
        )

        for desired_index, item in enumerate(desired_order):
            if item.children and self.should_reorganize_children(item):
                self.reorganize(item.children)

            current_index = current_order.index(item)
            if current_index == desired_index:
                continue

            self.relocate(item, current_order[desired_index], code_items)

            current_order.pop(current_index)
            current_order.insert(desired_index, item)

    @staticmethod
    def get_reorganizable_elements(
        code_items: list[DeclarationItem],
    ) -> list[DeclarationItem]:
        """Element items in document order, one per shared definition"""
        first_by_offset: dict[int, DeclarationItem] = {}
        for item in code_items:
            if item.is_element and item.start_offset not in first_by_offset:
                first_by_offset[item.start_offset] = item
        return sorted(first_by_offset.values(), key=lambda i: i.start_offset)

    @staticmethod
    def keep_definition_dependencies(
        desired_order: list[DeclarationItem],
        code_items: list[DeclarationItem],
    ) -> list[DeclarationItem]:
        """Place each item after the earlier siblings it reads while defined.

        Bodies that execute top to bottom (Python classes) fail when a
        declaration moves above a name it reads. A dependency is pulled in
        right before the first item needing it; only siblings defined earlier
        count, so the document order is always a valid answer.
        """
        by_offset = {item.start_offset: item for item in desired_order}
        references: dict[int, set[str]] = {}
        for item in code_items:
            references.setdefault(item.start_offset, set()).update(item.references)

        def dependencies(item: DeclarationItem) -> list[DeclarationItem]:
            names = references.get(item.start_offset, set())
            found = []
            for sibling in code_items:
                dependency = by_offset.get(sibling.start_offset)
                if (
                    dependency is not None
                    and sibling.name in names
                    and sibling.start_offset < item.start_offset
                    and dependency not in found
                ):
                    found.append(dependency)
            return sorted(found, key=desired_order.index)

        ordered: list[DeclarationItem] = []

        def place(item: DeclarationItem) -> None:
            if item in ordered:
                return
            for dependency in dependencies(item):
                place(dependency)
            ordered.append(item)

        for item in desired_order:
            place(item)
        return ordered

    def should_reorganize_children(self, parent: DeclarationItem) -> bool:
        """False when the order of parent's children is significant"""
        if parent.kind == KindCodeItem.ENUM:
            logger.debug(f"Keeping member order of enum {parent.name}")
            return False

        for attribute in parent.attributes:
            if any(
                attribute_matches(attribute, denied)
                for denied in self.order_significant_attributes
            ):
                logger.debug(
                    f"Keeping member order of {parent.name} because of {attribute}"
                )
                return False

        return True

    # ============================================================
    # MOVING
    # ============================================================

    def relocate(
        self,
        item_to_move: DeclarationItem,
        base_item: DeclarationItem,
        siblings: list[DeclarationItem] | None = None,
    ) -> None:
        """Move item_to_move (and what travels with it) above base_item"""
        if item_to_move is base_item:
            return

        separate = self.should_be_separated_by_blank_line(item_to_move, base_item)
        carried = self._carried_items(item_to_move, siblings or [item_to_move])

        cut_text, cursor_offset, relative_spans = self._cut_item_to_move(
            item_to_move, carried
        )
        self._paste_above_base_item(
            base_item, item_to_move, cut_text, separate, cursor_offset, relative_spans
        )
        self.moves_performed += 1
        logger.debug(f"Moved {item_to_move.name} above {base_item.name}")

    def should_be_separated_by_blank_line(
        self,
        first_item: DeclarationItem,
        second_item: DeclarationItem,
    ) -> bool:
        return self.blank_line_policy.wants_trailing_blank_line(
            first_item
        ) or self.blank_line_policy.wants_leading_blank_line(second_item)

    @staticmethod
    def _carried_items(
        item_to_move: DeclarationItem,
        siblings: list[DeclarationItem],
    ) -> list[DeclarationItem]:
        """The item, its grouped definitions and all of their descendants"""
        group = [item_to_move] + [
            sibling
            for sibling in siblings
            if sibling is not item_to_move
            and sibling.start_offset == item_to_move.start_offset
        ]
        return [node for member in group for node in member.iter_tree()]

    def _cut_item_to_move(
        self,
        item_to_move: DeclarationItem,
        carried: list[DeclarationItem],
    ) -> tuple[str, int | None, list[tuple[TextSpan, int, int]]]:
        """Remove the item's lines from the surface.

        Returns:
            The cut text, the cursor offset relative to the item start (None
            when the cursor is outside the item) and the carried spans with
            their offsets relative to the cut start
        """
        surface = self.surface
        start = item_to_move.start_offset
        end = max(node.end_offset for node in carried)

        cursor = surface.get_cursor_offset()
        cursor_offset = (
            cursor - start if start <= cursor <= item_to_move.end_offset else None
        )

        cut_start = surface.line_start(
            find_comment_start(surface, start, self.language)
        )
        cut_end = surface.line_end(end)
        relative_spans = [
            (node.span, node.start_offset - cut_start, node.end_offset - cut_start)
            for node in carried
        ]

        cut_text = surface.get_text(cut_start, cut_end)
        # Take the preceding line break so enclosing spans keep ending on a
        # line of their own
        if cut_start > 0:
            surface.delete_text(cut_start - 1, cut_end)
        else:
            surface.delete_text(cut_start, min(cut_end + 1, len(surface)))
        surface.delete_surrounding_blank_lines(cut_start)

        return cut_text, cursor_offset, relative_spans

    def _paste_above_base_item(
        self,
        base_item: DeclarationItem,
        item_to_move: DeclarationItem,
        cut_text: str,
        separate: bool,
        cursor_offset: int | None,
        relative_spans: list[tuple[TextSpan, int, int]],
    ) -> None:
        surface = self.surface
        paste_offset = surface.line_start(
            find_comment_start(surface, base_item.start_offset, self.language)
        )

        surface.insert_text(paste_offset, cut_text + "\n" + ("\n" if separate else ""))
        for span, relative_start, relative_end in relative_spans:
            span.move_to(paste_offset + relative_start, paste_offset + relative_end)

        surface.reformat_indent(paste_offset, paste_offset + len(cut_text))

        if cursor_offset is not None:
            surface.set_cursor_offset(item_to_move.start_offset + cursor_offset)
