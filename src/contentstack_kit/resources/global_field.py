"""Global field façade."""

from typing import TYPE_CHECKING, Any

from ..exceptions import ConfigurationError
from ..models.enums import GlobalFieldInclude
from ..models.request.query import GlobalFieldQuery

if TYPE_CHECKING:
    from ..client.base import BaseStack


class GlobalField:
    """Global field of a stack."""

    def __init__(self, stack: "BaseStack", uid: str | None = None) -> None:
        self._stack = stack
        self.uid = uid
        self._query = GlobalFieldQuery(stack)

    def include_global_field_schema(self) -> "GlobalField":
        self._query.include(GlobalFieldInclude.GLOBAL_FIELD_SCHEMA)
        return self

    def include_branch(self) -> "GlobalField":
        self._query.include(GlobalFieldInclude.BRANCH)
        return self

    def query(self) -> GlobalFieldQuery:
        """Query over the global fields of the stack, with the flags set on this façade."""
        query = GlobalFieldQuery(self._stack)
        query.include(self._query.include_flags)
        return query

    def find(self) -> Any:
        """List all global fields."""
        return self.query().find()

    def fetch(self) -> Any:
        """Fetch this global field as a ``GlobalFieldModel``.

        Raises:
            ConfigurationError: If the global field has no uid
        """
        if not self.uid:
            raise ConfigurationError("Please provide GlobalField uid")
        return self._stack.fetch(self._query, self.uid)
