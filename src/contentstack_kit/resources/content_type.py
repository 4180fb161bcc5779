"""Content type façade."""

from typing import TYPE_CHECKING, Any

from ..exceptions import ConfigurationError
from ..models.enums import ContentTypeInclude
from ..models.request.query import ContentTypeQuery
from .entry import Entry

if TYPE_CHECKING:
    from ..client.base import BaseStack


class ContentType:
    """Content type of a stack, and entry point to its entries.

    Example:
        >>> product = stack.content_type("product")
        >>> schema = product.fetch()
        >>> entries = product.entry().query().find()
    """

    def __init__(self, stack: "BaseStack", uid: str | None = None) -> None:
        self._stack = stack
        self.uid = uid
        self._query = ContentTypeQuery(stack)

    def _require_uid(self) -> str:
        if not self.uid:
            raise ConfigurationError("Please provide ContentType uid")
        return self.uid

    def entry(self, uid: str | None = None) -> Entry:
        """Entry façade of this content type.

        Raises:
            ConfigurationError: If the content type has no uid
        """
        return Entry(self._stack, self._require_uid(), uid)

    def include_global_fields(self) -> "ContentType":
        """Include the schema of referenced global fields when fetching."""
        self._query.include(ContentTypeInclude.GLOBAL_FIELDS)
        return self

    def add_header(self, name: str, value: str) -> "ContentType":
        self._query.add_header(name, value)
        return self

    def query(self) -> ContentTypeQuery:
        """Query over all content types of the stack."""
        return ContentTypeQuery(self._stack)

    def fetch(self) -> Any:
        """Fetch this content type's schema.

        Returns a ``ContentTypeModel`` (awaitable from an ``AsyncStack``).

        Raises:
            ConfigurationError: If the content type has no uid
        """
        return self._stack.fetch(self._query, self._require_uid())
