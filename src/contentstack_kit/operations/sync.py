"""Incremental synchronization of published content.

The sync endpoint delivers change events page by page. A
:class:`SyncStack` is the cursor of that protocol:

- INIT: no token yet; the first request sends ``init=true`` plus any
  :class:`SyncType` restrictions
- PAGINATING: a ``pagination_token`` is held; more pages follow
- RESUMING: a ``sync_token`` from an earlier run is held; the next
  request fetches the changes made since
- TERMINAL: the ``sync_token`` was delivered in this run; caught up

Persist ``sync_token`` (and ``last_seq_id``) between runs to resume.

Example:
    >>> sync_stack = SyncStack()
    >>> for page in stack.sync(sync_stack, [SyncType.content_type("product")]):
    ...     apply(page.items)
    >>> save(sync_stack.sync_token)
"""

import logging
from collections.abc import AsyncGenerator, Generator, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ConfigurationError, ItemDecodeError, SchemaMismatchError, SyncError
from ..models.enums import PublishType, ResourceKind, SyncState
from ..models.request.encoding import format_datetime
from ..models.response.models import SyncItem

if TYPE_CHECKING:
    from ..client.async_client import AsyncStack
    from ..client.sync_client import Stack

logger = logging.getLogger(__name__)

SYNC_PATH = ResourceKind.SYNC.value


@dataclass(frozen=True)
class SyncType:
    """Restriction of an initial sync.

    Build instances with the named constructors.
    """

    key: str | None = None
    value: Any = None

    @classmethod
    def all(cls) -> "SyncType":
        """No restriction."""
        return cls()

    @classmethod
    def content_type(cls, uid: str) -> "SyncType":
        return cls("content_type_uid", uid)

    @classmethod
    def locale(cls, code: str) -> "SyncType":
        return cls("locale", code)

    @classmethod
    def start_from(cls, start: datetime) -> "SyncType":
        """Only changes made at or after ``start``."""
        return cls("start_from", format_datetime(start))

    @classmethod
    def publish_type(cls, publish_type: PublishType) -> "SyncType":
        return cls("type", publish_type.value)

    @property
    def parameters(self) -> dict[str, Any]:
        if self.key is None:
            return {}
        return {self.key: self.value}


@dataclass(frozen=True)
class SyncPage:
    """One page of change events, with the cursor values after it."""

    items: list[SyncItem] = field(default_factory=list)
    sync_token: str = ""
    pagination_token: str = ""
    last_seq_id: str = ""
    total_count: int | None = None

    @property
    def has_more_pages(self) -> bool:
        return bool(self.pagination_token)


class SyncStack:
    """Mutable cursor of the sync protocol.

    A sync stack holds at most one of ``sync_token`` and
    ``pagination_token``. It is advanced in place as pages are consumed.

    Raises:
        ConfigurationError: If both tokens are given
    """

    def __init__(self, sync_token: str = "", pagination_token: str = "", last_seq_id: str = "") -> None:
        if sync_token and pagination_token:
            raise ConfigurationError(
                "Both sync_token and pagination_token cannot be set at the same time"
            )
        self.sync_token = sync_token
        self.pagination_token = pagination_token
        self.last_seq_id = last_seq_id
        self.items: list[SyncItem] = []
        self.total_count: int | None = None
        self._completed = False

    @property
    def is_initial_sync(self) -> bool:
        return not self.sync_token and not self.pagination_token

    @property
    def has_more_pages(self) -> bool:
        return bool(self.pagination_token)

    @property
    def state(self) -> SyncState:
        if self.pagination_token:
            return SyncState.PAGINATING
        if self.sync_token:
            return SyncState.TERMINAL if self._completed else SyncState.RESUMING
        return SyncState.INIT

    @property
    def parameters(self) -> dict[str, Any]:
        """URI parameters of the next sync request."""
        if self.pagination_token:
            params: dict[str, Any] = {"pagination_token": self.pagination_token}
        elif self.sync_token:
            params = {"sync_token": self.sync_token}
        else:
            params = {"init": True}
        if self.last_seq_id:
            params["seq_id"] = self.last_seq_id
        return params

    def apply(self, envelope: dict[str, Any]) -> SyncPage:
        """Advance the cursor with a sync response envelope.

        Args:
            envelope: Decoded JSON of a sync response

        Returns:
            Snapshot of the page just applied

        Raises:
            SyncError: If the envelope carries both or neither token
            SchemaMismatchError: If the envelope has no items array
            ItemDecodeError: If a change event does not decode
        """
        sync_token = envelope.get("sync_token") or ""
        pagination_token = envelope.get("pagination_token") or ""
        if sync_token and pagination_token:
            raise SyncError(
                "Sync response carries both sync_token and pagination_token",
                details={"sync_token": sync_token, "pagination_token": pagination_token},
            )
        if not sync_token and not pagination_token:
            raise SyncError(
                "Sync response carries neither sync_token nor pagination_token",
                details={"keys": sorted(envelope)},
            )

        raw_items = envelope.get("items")
        if not isinstance(raw_items, list):
            raise SchemaMismatchError(
                "Sync response has no 'items' array",
                details={"keys": sorted(envelope)},
            )

        items = []
        for index, raw in enumerate(raw_items):
            try:
                items.append(SyncItem.model_validate(raw))
            except PydanticValidationError as e:
                raise ItemDecodeError(f"Failed to decode sync item {index}: {e}", index=index) from e

        self.items = items
        self.total_count = envelope.get("total_count")
        self.sync_token = sync_token
        self.pagination_token = pagination_token
        self._completed = bool(sync_token)

        # The sequence id only advances with a non-empty page
        last_seq_id = envelope.get("last_seq_id")
        if items and last_seq_id:
            self.last_seq_id = str(last_seq_id)

        logger.debug(
            f"Applied sync page with {len(items)} items, state: {self.state.value}"
        )
        return SyncPage(
            items=list(items),
            sync_token=self.sync_token,
            pagination_token=self.pagination_token,
            last_seq_id=self.last_seq_id,
            total_count=self.total_count,
        )

    def request_parameters(self, sync_types: Iterable[SyncType] = ()) -> dict[str, Any]:
        """Parameters of the next request, with restrictions on an initial sync."""
        params = self.parameters
        if self.is_initial_sync:
            for sync_type in sync_types:
                params.update(sync_type.parameters)
        elif sync_types:
            logger.debug("Sync types only apply to an initial sync, ignoring them")
        return params

    def __repr__(self) -> str:
        return (
            f"SyncStack(state={self.state.value}, sync_token={self.sync_token!r}, "
            f"pagination_token={self.pagination_token!r}, last_seq_id={self.last_seq_id!r})"
        )


def sync_pages(
    stack: "Stack",
    sync_stack: SyncStack,
    sync_types: Iterable[SyncType] = (),
) -> Generator[SyncPage, None, None]:
    """Fetch sync pages lazily until the sync token is delivered.

    Each page is fetched only when the previous one has been consumed, and
    ``sync_stack`` is advanced before the page is yielded. Stopping early
    leaves ``sync_stack`` positioned after the last consumed page.

    Args:
        stack: Stack to request pages from
        sync_stack: Cursor, advanced in place
        sync_types: Restrictions applied to an initial sync

    Yields:
        SyncPage snapshots in server order

    Example:
        >>> with Stack(config) as stack:
        ...     for page in sync_pages(stack, SyncStack()):
        ...         print(len(page.items))
    """
    types = list(sync_types)

    while True:
        params = sync_stack.request_parameters(types)
        logger.debug(f"Sync request ({sync_stack.state.value}) params={params}")

        envelope = stack.get(SYNC_PATH, params)
        page = sync_stack.apply(envelope)
        yield page

        if not page.has_more_pages:
            break


async def sync_pages_async(
    stack: "AsyncStack",
    sync_stack: SyncStack,
    sync_types: Iterable[SyncType] = (),
) -> AsyncGenerator[SyncPage, None]:
    """Async version of sync_pages.

    Example:
        >>> async with AsyncStack(config) as stack:
        ...     async for page in sync_pages_async(stack, SyncStack()):
        ...         print(len(page.items))
    """
    types = list(sync_types)

    while True:
        params = sync_stack.request_parameters(types)
        logger.debug(f"Sync request ({sync_stack.state.value}) params={params}")

        envelope = await stack.get(SYNC_PATH, params)
        page = sync_stack.apply(envelope)
        yield page

        if not page.has_more_pages:
            break
