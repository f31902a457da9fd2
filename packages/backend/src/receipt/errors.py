"""Error taxonomy.

ValidationError and StorageError surface to HTTP callers through the
handlers registered in main.py. DeliveryError never leaves the hub.
"""


class ReceiptError(Exception):
    """Base class for all receipt errors."""


class ValidationError(ReceiptError):
    """Submitted entry data is missing, empty, or unparsable."""


class StorageError(ReceiptError):
    """The entry store could not complete a read or write."""


class MigrationError(StorageError):
    """The legacy schema upgrade failed and was rolled back."""


class DeliveryError(ReceiptError):
    """A push to a single subscriber failed."""

    def __init__(self, connection, cause: Exception):
        super().__init__(f"delivery failed: {cause!r}")
        self.connection = connection
        self.cause = cause
