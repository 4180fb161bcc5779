"""Response-side models: default resource models, typed decoding and materialization."""

from .decodable import ContentstackModel, EntryDecodable, ModelRegistry
from .field_bag import FieldBag
from .materializer import ResponseMaterializer, build_include_tree, decode_item
from .models import (
    AssetModel,
    ContentTypeModel,
    EntryModel,
    GlobalFieldModel,
    ImageDimension,
    SyncItem,
    TaxonomyModel,
)
from .response import ContentstackResponse

__all__ = [
    "AssetModel",
    "ContentTypeModel",
    "ContentstackModel",
    "ContentstackResponse",
    "EntryDecodable",
    "EntryModel",
    "FieldBag",
    "GlobalFieldModel",
    "ImageDimension",
    "ModelRegistry",
    "ResponseMaterializer",
    "SyncItem",
    "TaxonomyModel",
    "build_include_tree",
    "decode_item",
]
