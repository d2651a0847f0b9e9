from pathlib import PurePosixPath

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES = {
    # Images
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    # Videos
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".ogv": "video/ogg",
    ".mov": "video/quicktime",
    # Web resources
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".txt": "text/plain",
    ".html": "text/html",
    ".htm": "text/html",
}

# Uploads are limited to the extensions we know how to serve
ALLOWED_EXTENSIONS = frozenset(CONTENT_TYPES)


def extension_of(name: str) -> str:
    """Lower-cased extension including the dot, or '' when there is none."""
    return PurePosixPath(name).suffix.lower()


def is_allowed(name: str) -> bool:
    return extension_of(name) in ALLOWED_EXTENSIONS


def content_type_for(name: str) -> str:
    return CONTENT_TYPES.get(extension_of(name), DEFAULT_CONTENT_TYPE)
