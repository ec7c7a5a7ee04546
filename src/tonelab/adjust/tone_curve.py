from __future__ import annotations

import bisect
import enum
from dataclasses import dataclass, field
from typing import Any

import numpy as np


EPSILON = float(np.finfo(np.float32).eps)


class CurveType(str, enum.Enum):
    LINEAR = "linear"
    SMOOTH = "smooth"
    SHARP = "sharp"


def _clamp01(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


@dataclass(frozen=True)
class CurvePoint:
    input: float
    output: float


def _default_points() -> list[CurvePoint]:
    return [CurvePoint(0.0, 0.0), CurvePoint(1.0, 1.0)]


@dataclass
class ToneCurve:
    """Piecewise mapping over sorted control points.

    The first and last points are structural: they can be moved by replacing
    the curve, but ``remove_point`` refuses to drop them so the curve always
    covers the full [0, 1] domain.
    """

    points: list[CurvePoint] = field(default_factory=_default_points)
    curve_type: CurveType = CurveType.LINEAR

    def has_changes(self) -> bool:
        return (
            len(self.points) != 2
            or self.points[0] != CurvePoint(0.0, 0.0)
            or self.points[1] != CurvePoint(1.0, 1.0)
            or self.curve_type != CurveType.LINEAR
        )

    def reset(self) -> None:
        self.points = _default_points()
        self.curve_type = CurveType.LINEAR

    def add_point(self, input: float, output: float) -> None:
        point = CurvePoint(_clamp01(input), _clamp01(output))
        keys = [p.input for p in self.points]
        self.points.insert(bisect.bisect_right(keys, point.input), point)

    def remove_point(self, index: int) -> bool:
        if 0 < index < len(self.points) - 1:
            del self.points[index]
            return True
        return False

    def evaluate(self, input: float) -> float:
        x = _clamp01(input)

        for p1, p2 in zip(self.points, self.points[1:]):
            if p1.input <= x <= p2.input:
                span = p2.input - p1.input
                if abs(span) < EPSILON:
                    return p1.output

                t = (x - p1.input) / span
                if self.curve_type == CurveType.SMOOTH:
                    t2 = t * t
                    t3 = t2 * t
                    return p1.output * (1.0 - 3.0 * t2 + 2.0 * t3) + p2.output * (3.0 * t2 - 2.0 * t3)
                if self.curve_type == CurveType.SHARP:
                    return p1.output if t < 0.5 else p2.output
                return p1.output + t * (p2.output - p1.output)

        # Unreachable while the endpoints sit at 0 and 1.
        return x

    def lookup_table(self) -> np.ndarray:
        """256-entry uint8 table equivalent to evaluating every 8-bit input."""
        values = np.array([self.evaluate(v / 255.0) for v in range(256)], dtype=np.float32)
        return np.clip(values * np.float32(255.0), 0.0, 255.0).astype(np.uint8)

    def to_dict(self) -> dict[str, Any]:
        return {
            "curve_type": self.curve_type.value,
            "points": [[p.input, p.output] for p in self.points],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ToneCurve":
        curve_type = CurveType(str(raw.get("curve_type", CurveType.LINEAR.value)).lower())
        raw_points = raw.get("points")
        if raw_points is None:
            return cls(curve_type=curve_type)
        if len(raw_points) < 2:
            raise ValueError("tone_curve.points needs at least 2 points")

        points: list[CurvePoint] = []
        for pair in raw_points:
            if len(pair) != 2:
                raise ValueError(f"tone_curve point must be [input, output], got {pair!r}")
            points.append(CurvePoint(_clamp01(pair[0]), _clamp01(pair[1])))
        points.sort(key=lambda p: p.input)
        return cls(points=points, curve_type=curve_type)
