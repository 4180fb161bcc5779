"""Entry façade."""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from ..exceptions import ConfigurationError
from ..models.enums import EntryInclude
from ..models.request.query import EntryQuery, TypedEntryQuery

if TYPE_CHECKING:
    from ..client.base import BaseStack


class Entry:
    """Entry of a content type.

    Builder methods configure the single-entry fetch and return the façade
    for chaining.

    Example:
        >>> entry = (stack.content_type("product").entry("blt123")
        ...     .locale("fr-fr")
        ...     .include_reference(["brand"])
        ...     .fetch())
    """

    def __init__(self, stack: "BaseStack", content_type_uid: str, uid: str | None = None) -> None:
        self._stack = stack
        self.content_type_uid = content_type_uid
        self.uid = uid
        self._query = EntryQuery(stack, content_type_uid=content_type_uid)

    def locale(self, code: str) -> "Entry":
        self._query.locale(code)
        return self

    def only(self, fields: Iterable[str]) -> "Entry":
        self._query.only(fields)
        return self

    def except_(self, fields: Iterable[str]) -> "Entry":
        self._query.except_(fields)
        return self

    def include_reference(self, fields: Iterable[str]) -> "Entry":
        self._query.include_reference(fields)
        return self

    def include(self, flags: EntryInclude) -> "Entry":
        self._query.include(flags)
        return self

    def include_fallback(self) -> "Entry":
        self._query.include_fallback()
        return self

    def add_header(self, name: str, value: str) -> "Entry":
        self._query.add_header(name, value)
        return self

    def query(self, model: type[Any] | None = None) -> EntryQuery:
        """Query over the entries of the content type.

        Args:
            model: Caller model; returns a ``TypedEntryQuery`` bound to it

        Returns:
            New query, restricted to this entry's uid when one was given
        """
        query: EntryQuery
        if model is not None:
            query = TypedEntryQuery(self._stack, content_type_uid=self.content_type_uid, model=model)
        else:
            query = EntryQuery(self._stack, content_type_uid=self.content_type_uid)
        if self.uid:
            query.add_query("uid", self.uid)
        return query

    def fetch(self, model: type[Any] | None = None) -> Any:
        """Fetch this entry.

        Args:
            model: Caller model to decode into (defaults to the model
                registered for the content type, else a FieldBag)

        Returns:
            The decoded entry (awaitable from an ``AsyncStack``)

        Raises:
            ConfigurationError: If the entry has no uid
        """
        if not self.uid:
            raise ConfigurationError("Please provide Entry uid")
        self._query.model = model
        return self._stack.fetch(self._query, self.uid)
