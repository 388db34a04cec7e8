"""Error taxonomy for inventory operations."""


class InventoryError(Exception):
    """Base class for reported inventory failures."""


class ValidationError(InventoryError):
    """Input was rejected before any remote call."""


class FetchError(InventoryError):
    """The current set of items could not be retrieved."""


class PersistError(InventoryError):
    """A create or delete call to the remote store failed."""


class UpdateReportedError(InventoryError):
    """A count update failed remotely after the local change was applied.

    The local snapshot keeps the optimistic value and may disagree with the
    remote store until the next successful load.
    """
