"""Taxonomy façade."""

from typing import TYPE_CHECKING, Any

from ..models.request.query import TaxonomyQuery

if TYPE_CHECKING:
    from ..client.base import BaseStack


class Taxonomy:
    """Entry point for querying entries by taxonomy terms.

    Example:
        >>> response = (stack.taxonomy().query()
        ...     .where_term("color", Operation.eq_below("red"))
        ...     .find())
    """

    def __init__(self, stack: "BaseStack") -> None:
        self._stack = stack

    def query(self, model: type[Any] | None = None) -> TaxonomyQuery:
        return TaxonomyQuery(self._stack, model=model)

    def find(self) -> Any:
        """All entries that carry any taxonomy term."""
        return self.query().find()
