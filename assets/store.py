"""
Asset Store - flat directory of uploaded files

All path construction and filesystem calls for assets happen here. Every
public method sanitizes the supplied name first, so nothing outside the
asset root can be reached no matter what a caller passes in.

Writes are staged in a hidden subdirectory and moved into place with
os.replace when ``atomic_writes`` is on; readers then see either the old or
the new file. With it off the target is truncated and written in place and a
concurrent reader can observe a partial file. A write that may still be
rejected for size is always staged, so a rejected upload never touches the
file it would have replaced.
"""

import inspect
import logging
import os
import stat
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, List, Optional

import aiofiles
import aiofiles.os

from .content_types import content_type_for
from .exceptions import FileTooLarge, InvalidRequest, NotFound, StorageUnavailable

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
STAGING_DIR_NAME = ".staging"
STAGING_SUFFIX = ".part"
# Staged files older than this are left over from a crashed upload
STALE_STAGING_AGE = 60 * 60


def sanitize_name(name: Optional[str]) -> str:
    """Reduce a client supplied name to a bare file name.

    Both separators are treated as directory boundaries so a Windows style
    ``..\\..\\x`` is stripped the same way as ``../../x``.
    """
    if name is None:
        raise InvalidRequest("No file name supplied")
    if "\x00" in name:
        raise InvalidRequest("Invalid file name", name)
    base = name.replace("\\", "/").rsplit("/", 1)[-1].strip()
    if base in ("", ".", ".."):
        raise InvalidRequest("Invalid file name", name)
    return base


def _created_at(st: os.stat_result) -> datetime:
    # st_birthtime only exists on BSD/macOS (and Windows on 3.12+)
    ts = getattr(st, "st_birthtime", None) or st.st_ctime
    return datetime.fromtimestamp(ts, tz=timezone.utc)


@dataclass(frozen=True)
class Asset:
    name: str
    size: int
    created_at: datetime

    @property
    def content_type(self) -> str:
        return content_type_for(self.name)

    @classmethod
    def from_stat(cls, name: str, st: os.stat_result) -> "Asset":
        return cls(name=name, size=st.st_size, created_at=_created_at(st))


class AssetStream:
    """Open asset file, consumed once as an async iterator of chunks."""

    def __init__(self, asset: Asset, handle, chunk_size: int = CHUNK_SIZE) -> None:
        self.asset = asset
        self._handle = handle
        self._chunk_size = chunk_size
        self._closed = False

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iter_chunks()

    async def _iter_chunks(self) -> AsyncIterator[bytes]:
        try:
            while True:
                chunk = await self._handle.read(self._chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            await self.close()

    async def read_all(self) -> bytes:
        try:
            return await self._handle.read()
        finally:
            await self.close()

    async def close(self) -> None:
        if not self._closed:
            self._closed = True
            await self._handle.close()


class AssetStore:
    def __init__(self, root, *, atomic_writes: bool = True, chunk_size: int = CHUNK_SIZE) -> None:
        self.root = Path(root).expanduser().resolve()
        self.atomic_writes = atomic_writes
        self.chunk_size = chunk_size
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailable("init", e) from e
        logger.info("Asset root: %s (atomic_writes=%s)", self.root, atomic_writes)
        self.clear_stale_staging()

    @property
    def staging_dir(self) -> Path:
        return self.root / STAGING_DIR_NAME

    def clear_stale_staging(self, max_age: float = STALE_STAGING_AGE) -> int:
        """Remove staged files abandoned by a crashed upload.

        Only files older than ``max_age`` seconds go, so uploads still in
        flight in another worker sharing the root are left alone.
        """
        if not self.staging_dir.is_dir():
            return 0
        cutoff = time.time() - max_age
        removed = 0
        for path in self.staging_dir.glob(f"*{STAGING_SUFFIX}"):
            try:
                if path.stat().st_mtime > cutoff:
                    continue
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning("Could not inspect staged file %s: %s", path.name, e)
                continue
            self._discard(path)
            removed += 1
        if removed:
            logger.info("Removed %d stale staged upload(s)", removed)
        return removed

    def path_for(self, name: str) -> Path:
        safe = sanitize_name(name)
        path = self.root / safe
        if path.parent != self.root:
            raise InvalidRequest("Invalid file name", name)
        return path

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def list(self) -> List[Asset]:
        """Regular files directly under the root, in directory order."""
        try:
            with os.scandir(self.root) as it:
                entries = [entry for entry in it]
        except OSError as e:
            raise StorageUnavailable("list", e) from e

        assets: List[Asset] = []
        for entry in entries:
            try:
                if not entry.is_file():
                    continue
                st = entry.stat()
            except FileNotFoundError:
                # removed between scandir and stat
                continue
            except OSError as e:
                raise StorageUnavailable("list", e, entry.name) from e
            assets.append(Asset.from_stat(entry.name, st))
        return assets

    async def write(
        self, name: str, stream, *, max_bytes: Optional[int] = None, allow_empty: bool = True,
    ) -> Asset:
        """Copy ``stream`` to the asset ``name``, replacing any existing file.

        ``stream`` needs a ``read(size)`` method, sync or async. When
        ``max_bytes`` is given the copy is aborted with FileTooLarge as soon
        as more bytes arrive, and nothing is left behind. With ``allow_empty``
        off a stream that yields no bytes is rejected with InvalidRequest.
        Either rejection leaves an existing file of the same name untouched.
        """
        target = self.path_for(name)
        safe = target.name

        # empty streams are rejected before any file is opened
        first = await self._read_chunk(stream)
        if not first and not allow_empty:
            raise InvalidRequest("No file uploaded", safe)

        staged = self.atomic_writes or max_bytes is not None
        if staged:
            try:
                self.staging_dir.mkdir(exist_ok=True)
            except OSError as e:
                raise StorageUnavailable("write", e, safe) from e
            dest = self.staging_dir / f"{uuid.uuid4().hex}{STAGING_SUFFIX}"
        else:
            dest = target

        try:
            written = await self._copy(first, stream, dest, safe, max_bytes)
            if staged:
                await aiofiles.os.replace(dest, target)
            st = target.stat()
        except OSError as e:
            self._discard(dest)
            raise StorageUnavailable("write", e, safe) from e
        except BaseException:
            self._discard(dest)
            raise

        logger.debug("Wrote asset %s (%d bytes)", safe, written)
        return Asset.from_stat(safe, st)

    async def read(self, name: str) -> AssetStream:
        path = self.path_for(name)
        safe = path.name
        try:
            handle = await aiofiles.open(path, "rb")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            raise NotFound(safe) from None
        except OSError as e:
            raise StorageUnavailable("read", e, safe) from e

        try:
            st = os.fstat(handle.fileno())
        except OSError as e:
            await handle.close()
            raise StorageUnavailable("read", e, safe) from e
        if not stat.S_ISREG(st.st_mode):
            await handle.close()
            raise NotFound(safe)

        return AssetStream(Asset.from_stat(safe, st), handle, self.chunk_size)

    def delete(self, name: str) -> None:
        path = self.path_for(name)
        safe = path.name
        if not path.is_file():
            raise NotFound(safe)
        try:
            path.unlink()
        except FileNotFoundError:
            raise NotFound(safe) from None
        except OSError as e:
            raise StorageUnavailable("delete", e, safe) from e
        logger.debug("Deleted asset %s", safe)

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _read_chunk(self, stream) -> bytes:
        chunk = stream.read(self.chunk_size)
        if inspect.isawaitable(chunk):
            chunk = await chunk
        return chunk

    async def _copy(
        self, chunk: bytes, stream, dest: Path, name: str, max_bytes: Optional[int],
    ) -> int:
        written = 0
        async with aiofiles.open(dest, "wb") as f:
            while chunk:
                written += len(chunk)
                if max_bytes is not None and written > max_bytes:
                    raise FileTooLarge(name, max_bytes)
                await f.write(chunk)
                chunk = await self._read_chunk(stream)
        return written

    def _discard(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove partial upload %s: %s", path.name, e)
