from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

import numpy as np


class LoadError(RuntimeError):
    pass


class UnsupportedFormatError(LoadError):
    def __init__(self, extension: str) -> None:
        super().__init__(f"Unsupported format: {extension}")
        self.extension = extension


class RawDecodeError(LoadError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"RAW decode error: {detail}")


class ImageOpenError(LoadError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"Image open error: {detail}")


class InvalidDataError(LoadError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"Invalid data: {detail}")


class MissingDependencyError(LoadError):
    pass


@runtime_checkable
class Decoder(Protocol):
    def decode(self, path: Path) -> np.ndarray:
        ...
