from __future__ import annotations

from fractions import Fraction


def shutter_seconds_to_fraction(value: float | None, max_denominator: int = 1000000) -> str | None:
    if value is None:
        return None
    if value <= 0:
        return None
    if value >= 1.0:
        return f"{value:g}"

    frac = Fraction(value).limit_denominator(max_denominator)
    return f"{frac.numerator}/{frac.denominator}"


def format_adjustment(name: str, value: float) -> str:
    label = name.replace("_", " ").capitalize()
    if name == "exposure":
        return f"{label}: {value:+.2f} EV"
    if name == "temperature":
        return f"{label}: {value:+.0f} ({5500.0 + value * 50.0:.0f}K)"
    return f"{label}: {value:+.0f}"
