"""
Ordering policy for declaration items.

Each item gets an integer rank built from four factors, weighted so that
each one only breaks ties of the one before it:

    rank = kind * 1000 + constant * 100 + read_only * 10 + access

Sorting by rank groups items by declaration kind, then puts constants before
other fields, read-only fields before mutable ones, and finally orders by
descending visibility.
"""

from functools import cmp_to_key

from decl_reorganizer.core.code_items import (
    AccessModifier,
    DeclarationItem,
    KindCodeItem,
)

KIND_ORDER: list[KindCodeItem] = [
    KindCodeItem.CONSTANTS,
    KindCodeItem.FIELD,
    KindCodeItem.CONSTRUCTOR,
    KindCodeItem.METHOD,
    KindCodeItem.TEST_METHOD,
    KindCodeItem.PROPERTY,
    KindCodeItem.DESTRUCTOR,
]

ACCESS_MODIFIER_ORDER: list[AccessModifier] = [
    AccessModifier.PUBLIC,
    AccessModifier.PROTECTED_INTERNAL,
    AccessModifier.PROTECTED,
    AccessModifier.INTERNAL,
    AccessModifier.DEFAULT,
    AccessModifier.PRIVATE_PROTECTED,
    AccessModifier.PRIVATE,
]

KIND_WEIGHT = 1000
CONSTANT_WEIGHT = 100
READ_ONLY_WEIGHT = 10


def calculate_kind_offset(item: DeclarationItem) -> int:
    """1-based position in KIND_ORDER, 0 for kinds outside it"""
    if item.kind not in KIND_ORDER:
        return 0
    return KIND_ORDER.index(item.kind) + 1


def calculate_constant_offset(item: DeclarationItem) -> int:
    if not item.is_field:
        return 0
    return 0 if item.is_constant else 1


def calculate_read_only_offset(item: DeclarationItem) -> int:
    if not item.is_field:
        return 0
    return 0 if item.is_read_only else 1


def calculate_access_offset(item: DeclarationItem) -> int:
    """1-based position in ACCESS_MODIFIER_ORDER, 0 for non-element items"""
    if not item.is_element:
        return 0
    return ACCESS_MODIFIER_ORDER.index(item.access) + 1


def calculate_rank(item: DeclarationItem) -> int:
    return (
        calculate_kind_offset(item) * KIND_WEIGHT
        + calculate_constant_offset(item) * CONSTANT_WEIGHT
        + calculate_read_only_offset(item) * READ_ONLY_WEIGHT
        + calculate_access_offset(item)
    )


class CodeItemTypeComparer:
    """Compares declaration items by kind, field flags and access level"""

    def __init__(self, secondary_order_by_name: bool = False):
        """
        Args:
            secondary_order_by_name: Break rank ties by item name instead of
                keeping the original relative order
        """
        self.secondary_order_by_name = secondary_order_by_name

    def rank(self, item: DeclarationItem) -> int:
        return calculate_rank(item)

    def compare(self, x: DeclarationItem, y: DeclarationItem) -> int:
        """Three-way comparison: negative, zero or positive"""
        first, second = self.rank(x), self.rank(y)
        if first == second and self.secondary_order_by_name:
            first, second = x.name, y.name
        return (first > second) - (first < second)

    def sort(self, items: list[DeclarationItem]) -> list[DeclarationItem]:
        """Return a stably sorted copy of items"""
        return sorted(items, key=cmp_to_key(self.compare))
