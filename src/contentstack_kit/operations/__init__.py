"""Operations spanning several requests."""

from .sync import SyncPage, SyncStack, SyncType, sync_pages, sync_pages_async

__all__ = ["SyncPage", "SyncStack", "SyncType", "sync_pages", "sync_pages_async"]
