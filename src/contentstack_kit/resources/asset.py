"""Asset façade."""

from typing import TYPE_CHECKING, Any

from ..exceptions import ConfigurationError
from ..models.enums import AssetInclude
from ..models.request.operations import Operation
from ..models.request.query import AssetQuery

if TYPE_CHECKING:
    from ..client.base import BaseStack


class Asset:
    """Uploaded asset of a stack.

    Example:
        >>> asset = stack.asset("blt456").include_dimension().fetch()
        >>> asset.dimension.width
        1024.0
    """

    def __init__(self, stack: "BaseStack", uid: str | None = None) -> None:
        self._stack = stack
        self.uid = uid
        self._query = AssetQuery(stack)

    def locale(self, code: str) -> "Asset":
        self._query.locale(code)
        return self

    def include_relative_url(self) -> "Asset":
        self._query.include(AssetInclude.RELATIVE_URL)
        return self

    def include_dimension(self) -> "Asset":
        self._query.include(AssetInclude.DIMENSION)
        return self

    def include_fallback(self) -> "Asset":
        self._query.include(AssetInclude.FALLBACK)
        return self

    def include_metadata(self) -> "Asset":
        self._query.include(AssetInclude.METADATA)
        return self

    def add_header(self, name: str, value: str) -> "Asset":
        self._query.add_header(name, value)
        return self

    def query(self) -> AssetQuery:
        """Query over the assets of the stack."""
        query = AssetQuery(self._stack)
        if self.uid:
            query.where("uid", Operation.equals(self.uid))
        return query

    def fetch(self) -> Any:
        """Fetch this asset as an ``AssetModel`` (awaitable from an ``AsyncStack``).

        Raises:
            ConfigurationError: If the asset has no uid
        """
        if not self.uid:
            raise ConfigurationError("Please provide Asset uid")
        return self._stack.fetch(self._query, self.uid)
