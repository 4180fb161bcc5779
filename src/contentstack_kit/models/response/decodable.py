"""Typed decode mode.

Callers describe the shape of their content types with models that
implement :class:`EntryDecodable`. The simplest way is subclassing
:class:`ContentstackModel`:

Example:
    >>> class Product(ContentstackModel):
    ...     uid: str
    ...     title: str
    ...     price: float | None = None
    ...     brand: list[Brand] = Field(default_factory=list)
    >>>
    >>> registry = ModelRegistry()
    >>> registry.register("product", Product)
"""

import logging
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from .field_bag import FieldBag

logger = logging.getLogger(__name__)


@runtime_checkable
class EntryDecodable(Protocol):
    """A model that can be built from the fields of an entry."""

    @classmethod
    def field_keys(cls) -> frozenset[str]:
        """Wire keys the model reads (used to validate filters and sorts)."""
        ...

    @classmethod
    def from_fields(cls, fields: dict[str, Any]) -> Any:
        """Build an instance from the decoded JSON object of an entry."""
        ...


class ContentstackModel(BaseModel):
    """Base class for caller-defined entry models.

    Field aliases are the wire keys. Keys the model does not declare are
    ignored, as are the system fields of the server it does not list.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def field_keys(cls) -> frozenset[str]:
        return frozenset(f.alias or name for name, f in cls.model_fields.items())

    @classmethod
    def from_fields(cls, fields: dict[str, Any]) -> "ContentstackModel":
        return cls.model_validate(fields)


class ModelRegistry:
    """Mapping of content type UID to the model its entries decode into.

    Used when resolving references: a referenced entry whose content type
    is registered is decoded into that model, otherwise into a
    :class:`FieldBag`.
    """

    def __init__(self, models: dict[str, type[Any]] | None = None) -> None:
        self._models: dict[str, type[Any]] = {}
        for content_type_uid, model in (models or {}).items():
            self.register(content_type_uid, model)

    def register(self, content_type_uid: str, model: type[Any]) -> None:
        """Register the model for a content type.

        Raises:
            TypeError: If the model does not implement ``EntryDecodable``
        """
        if not (hasattr(model, "field_keys") and hasattr(model, "from_fields")):
            raise TypeError(f"{model!r} does not implement field_keys() and from_fields()")
        logger.debug(f"Registered model {model.__name__} for content type '{content_type_uid}'")
        self._models[content_type_uid] = model

    def get(self, content_type_uid: str | None) -> type[Any]:
        """Model for a content type, :class:`FieldBag` when none is registered."""
        if content_type_uid is None:
            return FieldBag
        return self._models.get(content_type_uid, FieldBag)

    def __contains__(self, content_type_uid: object) -> bool:
        return content_type_uid in self._models

    def __len__(self) -> int:
        return len(self._models)
