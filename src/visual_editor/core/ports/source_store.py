from pathlib import Path
from typing import Protocol


class SourceStore(Protocol):
    """Where component sources are read from and written back to.

    ``read`` raises ``FileNotFoundError``/``OSError`` for missing or unreadable
    files; ``write`` raises ``OSError`` and must not leave a partial file.
    """

    async def read(self, path: Path) -> bytes: ...

    async def write(self, path: Path, data: bytes) -> None: ...
