from pathlib import Path


class InMemorySourceStore:
    """A dict-backed ``SourceStore`` for tests and embedding."""

    def __init__(self, files: dict[Path, bytes] | None = None) -> None:
        self.files: dict[Path, bytes] = dict(files or {})
        self.writes: list[Path] = []
        self.fail_writes = False

    def put(self, path: Path, text: str) -> None:
        self.files[path] = text.encode("utf-8")

    def get(self, path: Path) -> str:
        return self.files[path].decode("utf-8")

    async def read(self, path: Path) -> bytes:
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(f"No such file: '{path}'") from None

    async def write(self, path: Path, data: bytes) -> None:
        if self.fail_writes:
            raise OSError(f"Write refused for '{path}'")
        self.files[path] = data
        self.writes.append(path)
