from visual_editor.storage.filesystem import LocalSourceStore
from visual_editor.storage.memory import InMemorySourceStore

__all__ = [
    "InMemorySourceStore",
    "LocalSourceStore",
]
