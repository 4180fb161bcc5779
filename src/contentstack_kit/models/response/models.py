"""Default models for Content Delivery API resources.

These are used when a query is executed without a caller model. Unknown
keys are kept (``extra="allow"``) so custom fields remain accessible via
``model_extra``.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SystemFields(BaseModel):
    """Fields shared by every published resource."""

    uid: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None
    updated_by: str | None = None
    version: int | None = Field(None, alias="_version")
    publish_details: dict[str, Any] | list[dict[str, Any]] | None = None

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class EntryModel(SystemFields):
    """Entry of any content type."""

    title: str | None = None
    locale: str | None = None
    tags: list[str] = Field(default_factory=list)
    content_type_uid: str | None = Field(None, alias="_content_type_uid")

    @classmethod
    def field_keys(cls) -> frozenset[str]:
        return frozenset(f.alias or name for name, f in cls.model_fields.items())

    @classmethod
    def from_fields(cls, fields: dict[str, Any]) -> "EntryModel":
        return cls.model_validate(fields)

    def get_field(self, key: str, default: Any = None) -> Any:
        """Get a custom field of the entry."""
        return (self.model_extra or {}).get(key, default)


class ImageDimension(BaseModel):
    """Pixel dimensions of an image asset."""

    height: float
    width: float


class AssetModel(SystemFields):
    """Uploaded asset.

    ``file_size`` is delivered as a string and decoded as a number.
    """

    title: str | None = None
    filename: str | None = None
    url: str | None = None
    content_type: str | None = None
    file_size: float | None = None
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    dimension: ImageDimension | None = None
    parent_uid: str | None = None

    @field_validator("file_size", mode="before")
    @classmethod
    def _parse_file_size(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return None
        return value


def _contains_global_field(schema: list[dict[str, Any]]) -> bool:
    for field in schema:
        if not isinstance(field, dict):
            continue
        if field.get("data_type") == "global_field":
            return True
        nested = field.get("schema")
        if isinstance(nested, list) and _contains_global_field(nested):
            return True
        for block in field.get("blocks") or []:
            if isinstance(block, dict) and _contains_global_field(block.get("schema") or []):
                return True
    return False


class ContentTypeModel(BaseModel):
    """Content type schema."""

    uid: str
    title: str
    description: str | None = None
    schema_: list[dict[str, Any]] = Field(default_factory=list, alias="schema")
    options: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def get_field(self, uid: str) -> dict[str, Any] | None:
        """Get the schema descriptor of a top-level field."""
        for field in self.schema_:
            if field.get("uid") == uid:
                return field
        return None

    def reference_fields(self) -> list[str]:
        """UIDs of top-level reference fields."""
        return [f["uid"] for f in self.schema_ if f.get("data_type") == "reference" and "uid" in f]


class GlobalFieldModel(BaseModel):
    """Reusable field group shared by content types."""

    uid: str
    title: str
    description: str | None = None
    schema_: list[dict[str, Any]] = Field(default_factory=list, alias="schema")
    version: int | None = Field(None, alias="_version")
    branch: str | None = Field(None, alias="_branch")
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @property
    def has_global_field(self) -> bool:
        """Whether the schema nests another global field at any depth."""
        return _contains_global_field(self.schema_)


class TaxonomyModel(EntryModel):
    """Entry returned by a taxonomy query, with its assigned terms."""

    taxonomies: list[dict[str, Any]] = Field(default_factory=list)


class SyncItem(BaseModel):
    """Change event delivered by the sync endpoint."""

    type: str
    event_at: datetime | None = None
    content_type_uid: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow")

    @property
    def uid(self) -> str | None:
        value = self.data.get("uid")
        return value if isinstance(value, str) else None
