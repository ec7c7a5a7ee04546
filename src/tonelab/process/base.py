from __future__ import annotations

from .steps import ProcessStep


class StageError(RuntimeError):
    def __init__(self, message: str, step: ProcessStep | None = None) -> None:
        super().__init__(message)
        self.step = step
