"""
Unit tests for the declaration ordering policy
"""

import pytest

from decl_reorganizer.core.code_items import (
    AccessModifier,
    DeclarationItem,
    KindCodeItem,
)
from decl_reorganizer.core.item_comparer import (
    ACCESS_MODIFIER_ORDER,
    CodeItemTypeComparer,
    calculate_access_offset,
    calculate_kind_offset,
    calculate_rank,
)
from decl_reorganizer.core.text_buffer import TextSpan


def make_item(kind, access=AccessModifier.PUBLIC, name="", **kwargs):
    return DeclarationItem(
        kind=kind, span=TextSpan(0, 0), name=name, access=access, **kwargs
    )


class TestRank:
    """Test rank calculation"""

    def test_kind_offsets(self):
        assert calculate_kind_offset(make_item(KindCodeItem.CONSTANTS)) == 1
        assert calculate_kind_offset(make_item(KindCodeItem.DESTRUCTOR)) == 7
        assert calculate_kind_offset(make_item(KindCodeItem.CLASS)) == 0

    def test_access_offset_of_non_element(self):
        assert calculate_access_offset(make_item(KindCodeItem.REGION, None)) == 0

    def test_public_const_field(self):
        item = make_item(KindCodeItem.FIELD, is_constant=True)

        # kind 2, constant 0, read-only 1, access 1
        assert calculate_rank(item) == 2011

    def test_private_read_only_field(self):
        item = make_item(
            KindCodeItem.FIELD, AccessModifier.PRIVATE, is_read_only=True
        )

        assert calculate_rank(item) == 2107

    def test_field_flags_ignored_for_methods(self):
        item = make_item(KindCodeItem.METHOD, is_constant=True, is_read_only=True)

        assert calculate_rank(item) == 4001

    def test_constructor_before_method(self):
        constructor = make_item(KindCodeItem.CONSTRUCTOR, AccessModifier.PRIVATE)
        method = make_item(KindCodeItem.METHOD)

        assert calculate_rank(constructor) < calculate_rank(method)

    def test_rank_monotonic_over_access(self):
        ranks = [
            calculate_rank(make_item(KindCodeItem.METHOD, access))
            for access in ACCESS_MODIFIER_ORDER
        ]

        assert ranks == sorted(ranks)
        assert len(set(ranks)) == len(ranks)

    def test_const_before_read_only_before_mutable(self):
        const = make_item(KindCodeItem.FIELD, AccessModifier.PRIVATE, is_constant=True)
        read_only = make_item(KindCodeItem.FIELD, is_read_only=True)
        mutable = make_item(KindCodeItem.FIELD)

        assert calculate_rank(const) < calculate_rank(read_only) < calculate_rank(
            mutable
        )


class TestCodeItemTypeComparer:
    """Test comparing and sorting items"""

    def test_compare(self):
        comparer = CodeItemTypeComparer()
        field = make_item(KindCodeItem.FIELD)
        method = make_item(KindCodeItem.METHOD)

        assert comparer.compare(field, method) == -1
        assert comparer.compare(method, field) == 1
        assert comparer.compare(method, make_item(KindCodeItem.METHOD)) == 0

    def test_sort_is_stable(self):
        comparer = CodeItemTypeComparer()
        items = [
            make_item(KindCodeItem.METHOD, name="b"),
            make_item(KindCodeItem.FIELD, name="x"),
            make_item(KindCodeItem.METHOD, name="a"),
        ]

        result = comparer.sort(items)

        assert [item.name for item in result] == ["x", "b", "a"]
        assert [item.name for item in items] == ["b", "x", "a"]

    def test_sort_by_name_on_ties(self):
        comparer = CodeItemTypeComparer(secondary_order_by_name=True)
        items = [
            make_item(KindCodeItem.METHOD, name="b"),
            make_item(KindCodeItem.METHOD, name="a"),
        ]

        assert [item.name for item in comparer.sort(items)] == ["a", "b"]

    @pytest.mark.parametrize(
        "first, second",
        [
            (KindCodeItem.CONSTANTS, KindCodeItem.FIELD),
            (KindCodeItem.FIELD, KindCodeItem.CONSTRUCTOR),
            (KindCodeItem.METHOD, KindCodeItem.TEST_METHOD),
            (KindCodeItem.PROPERTY, KindCodeItem.DESTRUCTOR),
        ],
    )
    def test_kind_order(self, first, second):
        comparer = CodeItemTypeComparer()

        assert comparer.compare(make_item(first), make_item(second)) < 0
