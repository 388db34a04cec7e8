"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status

from food_inventory.api.models import (
    CountAdjustment,
    FoodItemPayload,
    InventoryState,
    NewFoodItem,
    RemovalResult,
)
from food_inventory.app_logging import configure_logging
from food_inventory.containers import AppContainer
from food_inventory.domain.errors import PersistError, ValidationError
from food_inventory.domain.inventory import FoodItemDraft
from food_inventory.services.inventory import InventoryStore, OperationOutcome


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        if state_container.settings.load_on_startup:
            outcome = await state_container.inventory_store.load()
            if not outcome.ok:
                logger.warning("Starting with an empty inventory: %s", outcome.error)
        yield
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/items")
    async def list_items(request: Request) -> InventoryState:
        """Return the current snapshot and loading indicator."""
        return _state(_store(request))

    @app.post("/items/load")
    async def load_items(request: Request) -> InventoryState:
        """Reload the snapshot from the remote store."""
        store = _store(request)
        outcome = await store.load()
        if not outcome.ok:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=str(outcome.error),
            )
        return _state(store)

    @app.post("/items", status_code=status.HTTP_201_CREATED)
    async def add_item(body: NewFoodItem, request: Request) -> FoodItemPayload:
        """Create an item."""
        outcome = await _store(request).add(
            FoodItemDraft(name=body.name, price=body.price, count=body.count)
        )
        _raise_for_outcome(outcome)
        return FoodItemPayload.from_item(outcome.item)

    @app.delete("/items/{item_id}")
    async def remove_item(item_id: str, request: Request) -> RemovalResult:
        """Delete an item."""
        outcome = await _store(request).remove(item_id)
        _raise_for_outcome(outcome)
        return RemovalResult(removed=outcome.item is not None)

    @app.post("/items/{item_id}/increment")
    async def increment_item(item_id: str, request: Request) -> CountAdjustment:
        """Raise an item's count by one."""
        return _adjustment(await _store(request).increment(item_id))

    @app.post("/items/{item_id}/decrement")
    async def decrement_item(item_id: str, request: Request) -> CountAdjustment:
        """Lower an item's count by one."""
        return _adjustment(await _store(request).decrement(item_id))

    @app.post("/items/{item_id}/refresh")
    async def refresh_item(item_id: str, request: Request) -> CountAdjustment:
        """Re-read a single item from the remote store."""
        outcome = await _store(request).refresh(item_id)
        if not outcome.ok:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=str(outcome.error),
            )
        return _adjustment(outcome)

    return app


def _store(request: Request) -> InventoryStore:
    container: AppContainer = request.app.state.container
    return container.inventory_store


def _state(store: InventoryStore) -> InventoryState:
    return InventoryState(
        loading=store.loading,
        phase=store.phase.value,
        items=[FoodItemPayload.from_item(item) for item in store.items],
    )


def _raise_for_outcome(outcome: OperationOutcome) -> None:
    """Map confirm-then-apply failures onto HTTP errors."""
    if outcome.ok:
        return
    if isinstance(outcome.error, ValidationError):
        raise HTTPException(status_code=422, detail=str(outcome.error))
    if isinstance(outcome.error, PersistError):
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(outcome.error)
        )
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def _adjustment(outcome: OperationOutcome) -> CountAdjustment:
    item = FoodItemPayload.from_item(outcome.item) if outcome.item else None
    warning = None if outcome.ok else str(outcome.error)
    return CountAdjustment(item=item, warning=warning)
