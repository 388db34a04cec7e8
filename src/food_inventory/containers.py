"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from food_inventory.adapters.supabase_inventory_gateway import (
    SupabaseInventoryGateway,
)
from food_inventory.config import Settings
from food_inventory.services.inventory import InventoryGateway, InventoryStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    gateway: InventoryGateway
    inventory_store: InventoryStore
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    gateway = SupabaseInventoryGateway(
        client=supabase_client, table=resolved_settings.inventory_table
    )
    inventory_store = InventoryStore(gateway)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=resolved_settings,
        gateway=gateway,
        inventory_store=inventory_store,
        close_resources=close_resources,
    )
