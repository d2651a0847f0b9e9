"""Typed failures raised by the asset store and service.

Routes translate these into HTTP responses; see ``http_status`` on each
class.
"""

from typing import Optional


class AssetError(Exception):
    """Base class for every asset store failure."""

    http_status: int = 500

    def __init__(self, message: str, name: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.name = name


class InvalidRequest(AssetError):
    """Upload missing or empty, or a name that reduces to nothing."""

    http_status = 400


class UnsupportedType(AssetError):
    """File extension is not on the allow-list."""

    http_status = 400

    def __init__(self, name: str, extension: str) -> None:
        super().__init__("File type not allowed", name)
        self.extension = extension


class FileTooLarge(AssetError):
    http_status = 413

    def __init__(self, name: str, limit: int) -> None:
        super().__init__(f"File exceeds maximum size of {limit} bytes", name)
        self.limit = limit


class NotFound(AssetError):
    http_status = 404

    def __init__(self, name: str) -> None:
        super().__init__(f"Asset '{name}' not found", name)


class StorageUnavailable(AssetError):
    """Filesystem failure underneath the asset root.

    ``message`` only carries the OS error text and the sanitized name, never
    the absolute path, so it is safe to hand back to callers.
    """

    http_status = 500

    def __init__(self, operation: str, cause: OSError, name: Optional[str] = None) -> None:
        reason = cause.strerror or cause.__class__.__name__
        target = f" '{name}'" if name else ""
        super().__init__(f"Storage {operation}{target} failed: {reason}", name)
        self.operation = operation
        self.cause = cause
