#!/usr/bin/env python3
"""Catalog Sync Example

Mirrors the published products of a stack into a local JSON file and
keeps it current with incremental sync.

Usage:
    1. Set CONTENTSTACK_API_KEY, CONTENTSTACK_DELIVERY_TOKEN and
       CONTENTSTACK_ENVIRONMENT (or put them in a .env file)
    2. Run: python sync_catalog.py
    3. Run it again later; only the changes since the last run are fetched

Environment Variables (optional):
    CATALOG_FILE: Where the mirrored catalog is stored (default: catalog.json)
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from contentstack_kit import (
    ContentstackModel,
    Operation,
    PublishType,
    Stack,
    SyncStack,
    SyncType,
    load_config,
)
from contentstack_kit.exceptions import ContentstackError

CATALOG_FILE = Path(os.getenv("CATALOG_FILE", "catalog.json"))

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


class Product(ContentstackModel):
    uid: str
    title: str
    price: float | None = None


def load_state() -> dict[str, Any]:
    if CATALOG_FILE.is_file():
        return json.loads(CATALOG_FILE.read_text())
    return {"sync_token": "", "last_seq_id": "", "products": {}}


def save_state(state: dict[str, Any]) -> None:
    CATALOG_FILE.write_text(json.dumps(state, indent=2, sort_keys=True))


def apply_events(state: dict[str, Any], sync_stack: SyncStack, stack: Stack) -> int:
    """Apply every pending change event to the catalog."""
    applied = 0
    types = [SyncType.content_type("product")]

    for page in stack.sync(sync_stack, types):
        for item in page.items:
            if item.content_type_uid not in (None, "product") or item.uid is None:
                continue
            if item.type == PublishType.ENTRY_PUBLISHED.value:
                state["products"][item.uid] = Product.from_fields(item.data).model_dump()
            elif item.type in (
                PublishType.ENTRY_UNPUBLISHED.value,
                PublishType.ENTRY_DELETED.value,
            ):
                state["products"].pop(item.uid, None)
            applied += 1

    state["sync_token"] = sync_stack.sync_token
    state["last_seq_id"] = sync_stack.last_seq_id
    return applied


def main() -> None:
    config = load_config()
    state = load_state()
    sync_stack = SyncStack(sync_token=state["sync_token"], last_seq_id=state["last_seq_id"])

    try:
        with Stack(config) as stack:
            applied = apply_events(state, sync_stack, stack)
            save_state(state)
            print(f"Applied {applied} change events, {len(state['products'])} products mirrored")

            cheap = (
                stack.content_type("product")
                .entry()
                .query(Product)
                .where("price", Operation.is_less_than(50))
                .order_by_ascending("price")
                .limit(5)
                .find()
            )
            for product in cheap.items:
                print(f"  {product.title}: {product.price}")
    except ContentstackError as e:
        print(f"Sync failed: {e}")
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
