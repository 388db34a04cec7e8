"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from food_inventory.config import Settings
from food_inventory.containers import AppContainer
from food_inventory.domain.inventory import FoodItem, FoodItemDraft
from food_inventory.services.inventory import InventoryGateway, InventoryStore

_EPOCH = datetime(2024, 1, 1, tzinfo=UTC)


@dataclass
class InMemoryInventoryGateway(InventoryGateway):
    """In-memory gateway that records calls and can fail or block on demand."""

    rows: dict[str, FoodItem] = field(default_factory=dict)
    calls: list[tuple[str, object]] = field(default_factory=list)
    failing: set[str] = field(default_factory=set)
    gate: asyncio.Event | None = None
    # Each fetch_all reads the rows, then waits on the next event in the list.
    held_fetches: list[asyncio.Event] = field(default_factory=list)
    _ticks: int = 0

    def seed(self, name: str, price: str = "1.00", count: int = 1) -> FoodItem:
        item = FoodItem(
            id=str(uuid4()),
            name=name,
            price=price,
            count=count,
            created_at=self._next_timestamp(),
        )
        self.rows[item.id] = item
        return item

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]

    async def create(self, draft: FoodItemDraft) -> tuple[str, datetime]:
        await self._enter("create", draft)
        item_id = str(uuid4())
        created_at = self._next_timestamp()
        self.rows[item_id] = FoodItem(
            id=item_id,
            name=draft.name,
            price=draft.price,
            count=draft.count,
            created_at=created_at,
        )
        return item_id, created_at

    async def fetch_all(self) -> list[FoodItem]:
        snapshot = sorted(
            self.rows.values(), key=lambda item: item.created_at, reverse=True
        )
        await self._enter("fetch_all", None)
        if self.held_fetches:
            await self.held_fetches.pop(0).wait()
        return snapshot

    async def fetch_one(self, item_id: str) -> FoodItem | None:
        await self._enter("fetch_one", item_id)
        return self.rows.get(item_id)

    async def update(self, item_id: str, fields: dict[str, object]) -> None:
        await self._enter("update", (item_id, dict(fields)))
        self.rows[item_id] = replace(self.rows[item_id], **fields)

    async def delete(self, item_id: str) -> None:
        await self._enter("delete", item_id)
        self.rows.pop(item_id, None)

    async def _enter(self, operation: str, argument: object) -> None:
        self.calls.append((operation, argument))
        if self.gate is not None:
            await self.gate.wait()
        if operation in self.failing:
            raise RuntimeError(f"{operation} failed")

    def _next_timestamp(self) -> datetime:
        self._ticks += 1
        return _EPOCH + timedelta(minutes=self._ticks)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        load_on_startup=True,
    )


@pytest.fixture
def gateway() -> InMemoryInventoryGateway:
    return InMemoryInventoryGateway()


@pytest.fixture
def store(gateway: InMemoryInventoryGateway) -> InventoryStore:
    return InventoryStore(gateway)


@pytest.fixture
def container(
    settings: Settings,
    gateway: InMemoryInventoryGateway,
    store: InventoryStore,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        gateway=gateway,
        inventory_store=store,
        close_resources=close_resources,
    )
