"""
Declaration item model.

A document's declarations are held as a tree of DeclarationItem nodes. Each
item is a tagged variant (kind, access, field flags, attributes) over a live
TextSpan owned by the text surface, so its offsets stay valid while the
buffer is being edited.
"""

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from decl_reorganizer.core.errors import LazyValueLoadFailure
from decl_reorganizer.core.text_buffer import TextSpan

logger = logging.getLogger(__name__)


class KindCodeItem(Enum):
    """Kind of declaration an item represents"""

    CONSTANTS = "constants"
    FIELD = "field"
    CONSTRUCTOR = "constructor"
    METHOD = "method"
    TEST_METHOD = "test_method"
    PROPERTY = "property"
    DESTRUCTOR = "destructor"
    ENUM = "enum"
    INTERFACE = "interface"
    CLASS = "class"
    STRUCT = "struct"
    NAMESPACE = "namespace"
    DELEGATE = "delegate"
    EVENT = "event"
    INDEXER = "indexer"
    REGION = "region"
    USING_STATEMENT = "using_statement"


class AccessModifier(Enum):
    """Access level of an element declaration"""

    PUBLIC = "public"
    PROTECTED_INTERNAL = "protected_internal"
    PROTECTED = "protected"
    INTERNAL = "internal"
    DEFAULT = "default"
    PRIVATE_PROTECTED = "private_protected"
    PRIVATE = "private"


FIELD_KINDS = frozenset({KindCodeItem.CONSTANTS, KindCodeItem.FIELD})

CONTAINER_KINDS = frozenset(
    {
        KindCodeItem.CLASS,
        KindCodeItem.STRUCT,
        KindCodeItem.INTERFACE,
        KindCodeItem.ENUM,
        KindCodeItem.NAMESPACE,
    }
)


@dataclass(eq=False)
class DeclarationItem:
    """One declaration of a document.

    Items compare by identity: two fields with identical data are still two
    different declarations.
    """

    kind: KindCodeItem
    span: TextSpan
    name: str = ""
    access: AccessModifier | None = None
    is_constant: bool = False
    is_read_only: bool = False
    attributes: list[str] = field(default_factory=list)
    # Names read while the declaration itself is being defined
    references: set[str] = field(default_factory=set)
    children: list["DeclarationItem"] = field(default_factory=list)
    lazy_values: dict[str, Any] = field(default_factory=dict)
    _lazy_loaders: dict[str, Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )

    @property
    def start_offset(self) -> int:
        return self.span.start

    @property
    def end_offset(self) -> int:
        return self.span.end

    @property
    def is_element(self) -> bool:
        """True for declarations with a concrete access modifier"""
        return self.access is not None

    @property
    def is_field(self) -> bool:
        return self.kind in FIELD_KINDS

    @property
    def is_container(self) -> bool:
        return self.kind in CONTAINER_KINDS

    def iter_tree(self) -> Iterator["DeclarationItem"]:
        """Yield this item and all of its descendants, parents first"""
        yield self
        for child in self.children:
            yield from child.iter_tree()

    def add_lazy_value(self, name: str, loader: Callable[[], Any]) -> None:
        """Register a value that is only computed on demand"""
        self._lazy_loaders[name] = loader

    def load_lazy_values(self) -> None:
        """Compute every pending lazy value.

        Values that load successfully are kept even when a later one fails.

        Raises:
            LazyValueLoadFailure: a loader raised
        """
        for value_name in list(self._lazy_loaders):
            loader = self._lazy_loaders[value_name]
            try:
                self.lazy_values[value_name] = loader()
            except Exception as e:
                raise LazyValueLoadFailure(self.name, value_name, e) from e
            del self._lazy_loaders[value_name]

    def __str__(self) -> str:
        access = self.access.value if self.access else "-"
        return (
            f"{self.kind.value} {self.name} [{access}] "
            f"({self.start_offset}, {self.end_offset})"
        )
