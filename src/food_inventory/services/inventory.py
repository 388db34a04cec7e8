"""Inventory store keeping a local snapshot in sync with the remote store."""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Protocol

from food_inventory.domain.errors import (
    FetchError,
    InventoryError,
    PersistError,
    UpdateReportedError,
    ValidationError,
)
from food_inventory.domain.inventory import FoodItem, FoodItemDraft, StorePhase

_logger = logging.getLogger(__name__)


class InventoryGateway(Protocol):
    """Remote persistence interface for inventory items."""

    async def create(self, draft: FoodItemDraft) -> tuple[str, datetime]:
        """Persist a draft and return the assigned id and creation time."""

    async def fetch_all(self) -> list[FoodItem]:
        """Return every item, newest first."""

    async def fetch_one(self, item_id: str) -> FoodItem | None:
        """Return a single item by id, if present."""

    async def update(self, item_id: str, fields: dict[str, object]) -> None:
        """Apply a partial update to an item."""

    async def delete(self, item_id: str) -> None:
        """Delete an item."""


@dataclass(frozen=True)
class OperationOutcome:
    """Result of a store operation, reported to the presentation layer."""

    ok: bool
    item: FoodItem | None = None
    error: InventoryError | None = None

    @classmethod
    def success(cls, item: FoodItem | None = None) -> "OperationOutcome":
        return cls(ok=True, item=item)

    @classmethod
    def failure(
        cls, error: InventoryError, item: FoodItem | None = None
    ) -> "OperationOutcome":
        return cls(ok=False, item=item, error=error)


@dataclass
class InventoryStore:
    """Single source of truth for the displayed inventory.

    Creation and deletion are confirm-then-apply: the snapshot only changes
    after the gateway call succeeds. Count adjustments are apply-then-confirm:
    the snapshot changes before the gateway call and is not rolled back when
    the call fails.
    """

    gateway: InventoryGateway
    _items: list[FoodItem] = field(default_factory=list, init=False)
    _phase: StorePhase = field(default=StorePhase.IDLE, init=False)
    _load_generation: int = field(default=0, init=False)
    # Confirmed adds and removes since the newest load began fetching.
    _added_during_load: dict[str, FoodItem] = field(default_factory=dict, init=False)
    _removed_during_load: set[str] = field(default_factory=set, init=False)

    @property
    def items(self) -> tuple[FoodItem, ...]:
        """Current snapshot, newest first."""
        return tuple(self._items)

    @property
    def phase(self) -> StorePhase:
        return self._phase

    @property
    def loading(self) -> bool:
        """True while a load is in flight."""
        return self._phase is StorePhase.LOADING

    def get(self, item_id: str) -> FoodItem | None:
        """Return the local item with the given id, if present."""
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    async def load(self) -> OperationOutcome:
        """Replace the snapshot with the remote set of items.

        Only the most recently started load is applied. Items added or
        removed while its fetch was in flight are merged into the result.
        """
        self._load_generation += 1
        generation = self._load_generation
        self._added_during_load.clear()
        self._removed_during_load.clear()
        self._phase = StorePhase.LOADING
        try:
            fetched = await self.gateway.fetch_all()
        except Exception as exc:
            _logger.exception("Failed to load inventory")
            if generation == self._load_generation:
                self._phase = StorePhase.LOAD_FAILED
            return OperationOutcome.failure(
                _wrap(FetchError("Failed to load inventory"), exc)
            )
        if generation != self._load_generation:
            _logger.info("Discarding superseded inventory load")
            return OperationOutcome.success()

        merged = {
            item.id: item
            for item in fetched
            if item.id not in self._removed_during_load
        }
        merged.update(self._added_during_load)
        self._items = _newest_first(list(merged.values()))
        self._added_during_load.clear()
        self._removed_during_load.clear()
        self._phase = StorePhase.READY
        _logger.info("Inventory loaded: items=%s", len(self._items))
        return OperationOutcome.success()

    async def add(self, draft: FoodItemDraft) -> OperationOutcome:
        """Create an item remotely, then insert it into the snapshot, newest first."""
        try:
            cleaned = _validate_draft(draft)
        except ValidationError as exc:
            return OperationOutcome.failure(exc)

        try:
            item_id, created_at = await self.gateway.create(cleaned)
        except Exception as exc:
            _logger.exception(
                "Failed to create inventory item", extra={"item_name": cleaned.name}
            )
            return OperationOutcome.failure(
                _wrap(PersistError("Failed to create inventory item"), exc)
            )

        item = FoodItem(
            id=item_id,
            name=cleaned.name,
            price=cleaned.price,
            count=cleaned.count,
            created_at=created_at,
        )
        if self.loading:
            self._added_during_load[item_id] = item
        # A load may have completed while the create was in flight.
        rest = [i for i in self._items if i.id != item_id]
        self._items = _newest_first([item, *rest])
        return OperationOutcome.success(item)

    async def remove(self, item_id: str) -> OperationOutcome:
        """Delete an item remotely, then drop it from the snapshot."""
        item = self.get(item_id)
        if item is None:
            return OperationOutcome.success()

        try:
            await self.gateway.delete(item_id)
        except Exception as exc:
            _logger.exception(
                "Failed to delete inventory item", extra={"item_id": item_id}
            )
            return OperationOutcome.failure(
                _wrap(PersistError(f"Failed to delete item {item_id}"), exc)
            )

        self._items = [i for i in self._items if i.id != item_id]
        if self.loading:
            self._removed_during_load.add(item_id)
            self._added_during_load.pop(item_id, None)
        return OperationOutcome.success(item)

    async def increment(self, item_id: str) -> OperationOutcome:
        """Raise an item's count by one."""
        return await self._adjust_count(item_id, 1)

    async def decrement(self, item_id: str) -> OperationOutcome:
        """Lower an item's count by one; a count of zero is left alone."""
        return await self._adjust_count(item_id, -1)

    async def refresh(self, item_id: str) -> OperationOutcome:
        """Re-read a single item from the remote store into the snapshot."""
        try:
            fetched = await self.gateway.fetch_one(item_id)
        except Exception as exc:
            _logger.exception(
                "Failed to refresh inventory item", extra={"item_id": item_id}
            )
            return OperationOutcome.failure(
                _wrap(FetchError(f"Failed to refresh item {item_id}"), exc)
            )

        remaining = [i for i in self._items if i.id != item_id]
        if fetched is None:
            self._items = remaining
            return OperationOutcome.success()
        self._items = _newest_first([*remaining, fetched])
        return OperationOutcome.success(fetched)

    async def _adjust_count(self, item_id: str, delta: int) -> OperationOutcome:
        current = self.get(item_id)
        if current is None:
            return OperationOutcome.success()
        new_count = max(0, current.count + delta)
        if new_count == current.count:
            return OperationOutcome.success(current)

        # Applied before the await so the next call builds on this value.
        updated = replace(current, count=new_count)
        self._put(updated)

        try:
            await self.gateway.update(item_id, {"count": new_count})
        except Exception as exc:
            _logger.warning(
                "Count update failed, keeping local value: item_id=%s count=%s",
                item_id,
                new_count,
                exc_info=exc,
            )
            return OperationOutcome.failure(
                _wrap(UpdateReportedError(f"Failed to update item {item_id}"), exc),
                item=updated,
            )
        return OperationOutcome.success(updated)

    def _put(self, item: FoodItem) -> None:
        self._items = [item if i.id == item.id else i for i in self._items]


def _validate_draft(draft: FoodItemDraft) -> FoodItemDraft:
    """Trim and check a draft before it is sent to the remote store."""
    name = draft.name.strip()
    price = draft.price.strip()
    if not name:
        raise ValidationError("Name is required")
    if not price:
        raise ValidationError("Price is required")
    if isinstance(draft.count, bool) or not isinstance(draft.count, int):
        raise ValidationError("Count must be an integer")
    if draft.count < 0:
        raise ValidationError("Count must not be negative")
    return FoodItemDraft(name=name, price=price, count=draft.count)


def _newest_first(items: list[FoodItem]) -> list[FoodItem]:
    return sorted(items, key=lambda item: item.created_at, reverse=True)


def _wrap(error: InventoryError, cause: Exception) -> InventoryError:
    error.__cause__ = cause
    return error
