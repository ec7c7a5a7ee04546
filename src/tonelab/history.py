from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class SnapshotHistory(Protocol):
    """Undo/redo store owned by the interactive shell.

    Only the interface lives here. ``ProcessingWorker`` pushes each published
    full-resolution result into it; undo, redo and clearing stay with the shell.
    """

    def push(self, image: np.ndarray) -> None: ...

    def undo(self) -> np.ndarray | None: ...

    def redo(self) -> np.ndarray | None: ...

    def get_original(self) -> np.ndarray | None: ...

    def clear(self) -> None: ...
