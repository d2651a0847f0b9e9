"""
URL builder for assets.

URLs are derived from the asset name and the router prefix, never stored,
so moving the service behind a different prefix needs no data changes.
"""

from urllib.parse import quote


def build_asset_url(name: str, prefix: str = "/assets") -> str:
    """
    Build the fetch URL for an asset.

    Args:
        name: Sanitized asset name
        prefix: Path the asset router is mounted at (e.g. "/assets")

    Returns:
        Store-relative URL (e.g. "/assets/logo.png")
    """
    prefix = prefix.rstrip("/")
    return f"{prefix}/{quote(name, safe='')}"
