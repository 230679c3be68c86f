import asyncio
import contextlib
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def _write_atomic(path: Path, data: bytes) -> None:
    # Write next to the target and rename over it so a failed write never
    # leaves a truncated source file behind.
    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        with contextlib.suppress(OSError):
            os.chmod(temp_name, path.stat().st_mode & 0o7777)
        os.replace(temp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(temp_name)
        raise


class LocalSourceStore:
    """Reads and writes files on the local disk.

    Implements the ``SourceStore`` protocol. Blocking I/O runs in a worker
    thread so the event loop stays free.
    """

    async def read(self, path: Path) -> bytes:
        return await asyncio.to_thread(path.read_bytes)

    async def write(self, path: Path, data: bytes) -> None:
        await asyncio.to_thread(_write_atomic, path, data)
        logger.debug("Wrote %d bytes to %s", len(data), path)
