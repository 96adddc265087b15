from __future__ import annotations

from collections.abc import Sequence
import math
from typing import Any, NamedTuple

import numpy as np

from luvatrix_align.errors import DegenerateRange, InvalidArgument


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


class AxisRange(NamedTuple):
    minimum: float
    maximum: float

    @property
    def span(self) -> float:
        return self.maximum - self.minimum

    def ratio_of(self, value: float) -> float:
        """Fractional height of ``value`` inside this range.

        A zero-span range has no finite ratio: values below it map to -inf and
        values above it to +inf, so the stretch rule still picks the correct
        side. A value sitting exactly on a zero-span range is degenerate.
        """
        span = self.span
        if span == 0:
            if value < self.minimum:
                return -math.inf
            if value > self.maximum:
                return math.inf
            raise DegenerateRange(f"range {self.minimum!r}..{self.maximum!r} has zero span at its alignment value")
        return (value - self.minimum) / span

    def extended_to(self, value: float) -> AxisRange:
        if self.minimum < value and self.maximum < value:
            return AxisRange(self.minimum, value)
        if self.minimum > value and self.maximum > value:
            return AxisRange(value, self.maximum)
        return self


def as_float_array(values: Any, *, label: str) -> np.ndarray:
    """Coerce one series to a 1-D float64 array.

    Accepts lists and tuples, numpy arrays, pandas Series and torch tensors.
    ``None`` entries become NaN; strings are rejected.
    """
    arr = _as_ndarray(values, label=label)
    if arr.ndim != 1:
        raise InvalidArgument(f"{label} must be 1-D")
    if arr.dtype.kind in "iufb":
        return arr.astype(np.float64, copy=False)
    return np.fromiter(
        (_entry_to_float(raw, label=label, index=i) for i, raw in enumerate(arr.tolist())),
        dtype=np.float64,
        count=arr.shape[0],
    )


def finite_envelope(values: np.ndarray, *, label: str) -> AxisRange:
    finite = values[np.isfinite(values)]
    if finite.size == 0:
        raise InvalidArgument(f"{label} contains no finite values")
    return AxisRange(float(np.min(finite)), float(np.max(finite)))


def coerce_scalar(value: Any, *, label: str) -> float:
    try:
        out = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"{label} must be numeric, got {value!r}") from exc
    if not math.isfinite(out):
        raise InvalidArgument(f"{label} must be finite")
    return out


def stretch_to_ratio(bounds: AxisRange, value: float, target: float, *, ratio: float | None = None) -> AxisRange:
    """Move one bound of ``bounds`` outward so ``value`` sits at ``target``.

    When the current ratio is above the target the upper bound is raised,
    otherwise the lower bound is dropped. Bounds never move inward.
    """
    current = bounds.ratio_of(value) if ratio is None else ratio
    lo, hi = bounds
    if current > target:
        if target == 0.0:
            raise DegenerateRange("target ratio 0 would stretch the upper bound to infinity")
        return AxisRange(lo, max(hi, lo + (value - lo) / target))
    if current < target:
        if target == 1.0:
            raise DegenerateRange("target ratio 1 would stretch the lower bound to infinity")
        return AxisRange(min(lo, hi - (hi - value) / (1.0 - target)), hi)
    return bounds


def apply_buffers(bounds: AxisRange, *, upper: float, lower: float) -> AxisRange:
    span = bounds.span
    return AxisRange(bounds.minimum - span * lower, bounds.maximum + span * upper)


def _as_ndarray(values: Any, *, label: str) -> np.ndarray:
    if torch is not None and isinstance(values, torch.Tensor):
        return values.detach().cpu().to(torch.float64).numpy()
    if pd is not None and isinstance(values, pd.Series):
        return values.to_numpy()
    if isinstance(values, np.ndarray):
        return values
    if isinstance(values, Sequence) and not isinstance(values, (str, bytes, bytearray)):
        # Nested input keeps its shape here so the 1-D check can reject it.
        return np.asarray(values, dtype=object)
    raise InvalidArgument(f"unsupported {label} input type: {type(values)!r}")


def _entry_to_float(raw: Any, *, label: str, index: int) -> float:
    if raw is None:
        return math.nan
    if not isinstance(raw, (str, bytes)):
        try:
            return float(raw)
        except (TypeError, ValueError) as exc:
            raise InvalidArgument(f"{label}[{index}] is not numeric: {raw!r}") from exc
    raise InvalidArgument(f"{label}[{index}] is not numeric: {raw!r}")
