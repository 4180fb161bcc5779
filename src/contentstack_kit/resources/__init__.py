"""Resource façades."""

from .asset import Asset
from .content_type import ContentType
from .entry import Entry
from .global_field import GlobalField
from .taxonomy import Taxonomy

__all__ = ["Asset", "ContentType", "Entry", "GlobalField", "Taxonomy"]
