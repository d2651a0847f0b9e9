import logging
from typing import List, Optional

from .content_types import extension_of, is_allowed
from .exceptions import FileTooLarge, InvalidRequest, UnsupportedType
from .store import AssetStore, AssetStream, sanitize_name
from .url_builder import build_asset_url

logger = logging.getLogger(__name__)


class AssetService:
    """Validation in front of an AssetStore.

    Every check that can fail without touching the disk runs before the
    store is called, so a rejected upload never creates a file.
    """

    def __init__(
        self,
        store: AssetStore,
        *,
        url_prefix: str = "/assets",
        max_file_size: Optional[int] = None,
        enforce_max_file_size: bool = True,
    ) -> None:
        self.store = store
        self.url_prefix = url_prefix
        self.max_file_size = max_file_size
        self.enforce_max_file_size = enforce_max_file_size

    @classmethod
    def from_settings(cls, settings, store: Optional[AssetStore] = None) -> "AssetService":
        if store is None:
            store = AssetStore(settings.ASSET_ROOT, atomic_writes=settings.ATOMIC_WRITES)
        return cls(
            store,
            url_prefix=settings.URL_PREFIX,
            max_file_size=settings.MAX_FILE_SIZE,
            enforce_max_file_size=settings.ENFORCE_MAX_FILE_SIZE,
        )

    @property
    def size_limit(self) -> Optional[int]:
        if self.enforce_max_file_size and self.max_file_size is not None:
            return self.max_file_size
        return None

    def url_for(self, name: str) -> str:
        return build_asset_url(name, self.url_prefix)

    def list_assets(self) -> List[dict]:
        return [
            {
                "filename": asset.name,
                "size": asset.size,
                "dateUploaded": asset.created_at,
                "url": self.url_for(asset.name),
            }
            for asset in self.store.list()
        ]

    async def upload(self, filename: Optional[str], stream, size: Optional[int] = None) -> dict:
        """Validate and store an incoming file.

        ``size`` is the length the client declared, if any. When it is
        unknown the emptiness and size checks are made on the bytes actually
        received.
        """
        if stream is None or size == 0:
            raise InvalidRequest("No file uploaded", filename)

        name = sanitize_name(filename)
        if not is_allowed(name):
            raise UnsupportedType(name, extension_of(name))

        limit = self.size_limit
        if limit is not None and size is not None and size > limit:
            raise FileTooLarge(name, limit)

        asset = await self.store.write(name, stream, max_bytes=limit, allow_empty=False)

        logger.info("Uploaded asset %s (%d bytes)", asset.name, asset.size)
        return {
            "message": "File uploaded successfully",
            "url": self.url_for(asset.name),
        }

    async def fetch(self, filename: str) -> AssetStream:
        return await self.store.read(sanitize_name(filename))

    def delete(self, filename: str) -> dict:
        name = sanitize_name(filename)
        self.store.delete(name)
        logger.info("Deleted asset %s", name)
        return {"message": "File deleted successfully"}

