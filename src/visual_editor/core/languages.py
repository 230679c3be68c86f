from pathlib import Path

from visual_editor.core.errors import UnsupportedFileError

# The javascript grammar parses JSX natively; TSX needs its own grammar.
_EXTENSION_LANGUAGE_MAP = {
    ".cjs": "javascript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cts": "typescript",
    ".mts": "typescript",
    ".ts": "typescript",
    ".tsx": "tsx",
}


def detect_language_from_path(file_path: Path) -> str:
    suffix = file_path.suffix.lower()
    if suffix in _EXTENSION_LANGUAGE_MAP:
        return _EXTENSION_LANGUAGE_MAP[suffix]
    raise UnsupportedFileError(f"Unsupported file extension: {suffix or '(none)'}")
