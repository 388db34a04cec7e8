"""Supabase implementation of the inventory gateway."""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from food_inventory.domain.inventory import FoodItem, FoodItemDraft
from food_inventory.services.inventory import InventoryGateway


@dataclass
class SupabaseInventoryGateway(InventoryGateway):
    """Supabase-backed gateway for inventory items.

    The supabase client is blocking, so every call runs in a worker thread.
    """

    client: Client
    table: str = "inventory"

    async def create(self, draft: FoodItemDraft) -> tuple[str, datetime]:
        """Insert a draft and return the assigned id and creation time."""
        return await asyncio.to_thread(self._create, draft)

    async def fetch_all(self) -> list[FoodItem]:
        """Return all items ordered newest first."""
        return await asyncio.to_thread(self._fetch_all)

    async def fetch_one(self, item_id: str) -> FoodItem | None:
        """Return a single item by id, if present."""
        return await asyncio.to_thread(self._fetch_one, item_id)

    async def update(self, item_id: str, fields: dict[str, object]) -> None:
        """Apply a partial update to an item."""
        await asyncio.to_thread(self._update, item_id, fields)

    async def delete(self, item_id: str) -> None:
        """Delete an item."""
        await asyncio.to_thread(self._delete, item_id)

    def _create(self, draft: FoodItemDraft) -> tuple[str, datetime]:
        response = (
            self.client.table(self.table)
            .insert(
                {
                    "name": draft.name,
                    "price": draft.price,
                    "count": draft.count,
                    "created_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create inventory item")
        row = response.data[0]
        return str(row["id"]), _parse_timestamp(row.get("created_at"))

    def _fetch_all(self) -> list[FoodItem]:
        response = (
            self.client.table(self.table)
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_item(row) for row in response.data or []]

    def _fetch_one(self, item_id: str) -> FoodItem | None:
        response = (
            self.client.table(self.table)
            .select("*")
            .eq("id", item_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_item(response.data[0])

    def _update(self, item_id: str, fields: dict[str, object]) -> None:
        response = (
            self.client.table(self.table).update(fields).eq("id", item_id).execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to update inventory item {item_id}")

    def _delete(self, item_id: str) -> None:
        self.client.table(self.table).delete().eq("id", item_id).execute()


def _parse_item(row: dict[str, object]) -> FoodItem:
    """Parse an inventory row into a domain model."""
    return FoodItem(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        price=str(row.get("price", "")),
        count=int(row.get("count") or 0),
        created_at=_parse_timestamp(row.get("created_at")),
    )


def _parse_timestamp(raw: object) -> datetime:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    raise RuntimeError("Inventory row is missing created_at")
