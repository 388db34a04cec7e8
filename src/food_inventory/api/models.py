"""Pydantic models for the inventory HTTP API."""

from datetime import datetime

from pydantic import BaseModel

from food_inventory.domain.inventory import FoodItem


class FoodItemPayload(BaseModel):
    """Inventory item as returned to clients."""

    id: str
    name: str
    price: str
    count: int
    created_at: datetime

    @classmethod
    def from_item(cls, item: FoodItem) -> "FoodItemPayload":
        return cls(
            id=item.id,
            name=item.name,
            price=item.price,
            count=item.count,
            created_at=item.created_at,
        )


class NewFoodItem(BaseModel):
    """Request body for creating an item."""

    name: str
    price: str
    count: int = 1


class InventoryState(BaseModel):
    """Snapshot of the store for rendering."""

    loading: bool
    phase: str
    items: list[FoodItemPayload]


class CountAdjustment(BaseModel):
    """Result of an increment or decrement."""

    item: FoodItemPayload | None
    warning: str | None = None


class RemovalResult(BaseModel):
    removed: bool
