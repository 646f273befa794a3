"""
Exceptions raised while building and reorganizing declaration trees
"""


class ReorganizerError(Exception):
    """Base class for reorganizer errors"""


class ParseUnavailable(ReorganizerError):
    """No declaration tree could be produced for a document.

    Raised by parsers for unsupported languages or source that does not
    parse. The retriever logs it and continues with an empty item set.
    """


class LazyValueLoadFailure(ReorganizerError):
    """A deferred per-item value could not be computed"""

    def __init__(self, item_name: str, value_name: str, cause: Exception):
        self.item_name = item_name
        self.value_name = value_name
        self.cause = cause
        super().__init__(
            f"Unable to load '{value_name}' for '{item_name}': {cause}"
        )
