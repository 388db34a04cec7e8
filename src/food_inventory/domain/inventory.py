"""Domain models for the food inventory."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


@dataclass(frozen=True)
class FoodItem:
    """Represents an inventory entry stored remotely."""

    id: str
    name: str
    price: str
    count: int
    created_at: datetime


@dataclass(frozen=True)
class FoodItemDraft:
    """User input for a new inventory entry, before the remote assigns an id."""

    name: str
    price: str
    count: int = 1


class StorePhase(StrEnum):
    """Top-level lifecycle of the inventory store."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    LOAD_FAILED = "load_failed"
