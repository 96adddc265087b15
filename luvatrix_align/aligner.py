from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging
import math
from typing import Any

import numpy as np

from luvatrix_align.errors import DegenerateRange, InvalidArgument
from luvatrix_align.series import (
    AxisRange,
    apply_buffers,
    as_float_array,
    coerce_scalar,
    finite_envelope,
    stretch_to_ratio,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_BUFFER = 0.05

BufferInput = float | Sequence[float]


@dataclass(frozen=True, eq=False)
class AlignmentSpec:
    """Validated inputs for one multi-axis alignment.

    ``series`` holds float64 arrays; the remaining fields are parallel tuples
    with one entry per series. Use :meth:`build` to coerce loose caller input.
    """

    series: tuple[np.ndarray, ...]
    values_to_align: tuple[float, ...]
    weights: tuple[float, ...]
    upper_buffers: tuple[float, ...]
    lower_buffers: tuple[float, ...]
    labels: tuple[str, ...]

    def __post_init__(self) -> None:
        n = len(self.series)
        if n < 2:
            raise InvalidArgument("at least two series are required to align axes")
        for name in ("values_to_align", "weights", "upper_buffers", "lower_buffers", "labels"):
            count = len(getattr(self, name))
            if count != n:
                raise InvalidArgument(f"{name} must have {n} entries, got {count}")
        for label, values in zip(self.labels, self.series, strict=True):
            if not np.any(np.isfinite(values)):
                raise InvalidArgument(f"{label} contains no finite values")
        if not all(math.isfinite(v) for v in self.values_to_align):
            raise InvalidArgument("values_to_align must be finite")
        if not all(math.isfinite(w) for w in self.weights):
            raise InvalidArgument("weights must be finite")
        if any(w < 0 for w in self.weights):
            raise InvalidArgument("weights must be non-negative")
        if sum(self.weights) <= 0:
            raise InvalidArgument("weights must not all be zero")
        for name in ("upper_buffers", "lower_buffers"):
            for fraction in getattr(self, name):
                if not math.isfinite(fraction) or not 0.0 <= fraction <= 1.0:
                    raise InvalidArgument(f"{name} entries must be between 0 and 1 (inclusive)")

    @classmethod
    def build(
        cls,
        series: Sequence[Any],
        values_to_align: Sequence[float] | None = None,
        weights: Sequence[float] | None = None,
        upper_buffers: BufferInput = DEFAULT_BUFFER,
        lower_buffers: BufferInput = DEFAULT_BUFFER,
        labels: Sequence[str] | None = None,
    ) -> AlignmentSpec:
        if isinstance(series, (str, bytes)) or not isinstance(series, Sequence):
            raise InvalidArgument("series must be a sequence of numeric sequences")
        n = len(series)
        if labels is None:
            labels = [f"series[{i}]" for i in range(n)]
        labels = tuple(str(label) for label in labels)
        if len(labels) != n:
            raise InvalidArgument(f"labels must have {n} entries, got {len(labels)}")
        arrays = tuple(as_float_array(values, label=label) for values, label in zip(series, labels, strict=True))
        if values_to_align is None:
            values_to_align = [0.0] * n
        if weights is None:
            weights = [1.0 / n] * n if n else []
        return cls(
            series=arrays,
            values_to_align=_coerce_floats(values_to_align, "values_to_align"),
            weights=_coerce_floats(weights, "weights"),
            upper_buffers=_broadcast_buffers(upper_buffers, n, "upper_buffers"),
            lower_buffers=_broadcast_buffers(lower_buffers, n, "lower_buffers"),
            labels=labels,
        )


@dataclass(frozen=True)
class AlignmentResult:
    ranges: list[AxisRange]
    aligned_ranges: list[AxisRange]
    ratios: list[float | None]
    target_ratio: float


def solve_alignment(spec: AlignmentSpec) -> AlignmentResult:
    envelopes = [
        finite_envelope(values, label=label).extended_to(value)
        for values, label, value in zip(spec.series, spec.labels, spec.values_to_align, strict=True)
    ]

    # Series that are constant at their alignment value have no ratio.
    ratios: list[float | None] = [
        None if env.span == 0 else env.ratio_of(value)
        for env, value in zip(envelopes, spec.values_to_align, strict=True)
    ]
    usable_weight = sum(w for w, r in zip(spec.weights, ratios, strict=True) if r is not None)
    if usable_weight <= 0:
        raise DegenerateRange("no series with a non-zero span carries weight; cannot derive a target ratio")
    weighted = [(w, r) for w, r in zip(spec.weights, ratios, strict=True) if r is not None and w > 0]
    target = sum(w / usable_weight * r for w, r in weighted)
    # A weighted mean lies between its extreme terms; clamp away rounding drift.
    target = min(max(r for _, r in weighted), max(min(r for _, r in weighted), target))
    LOGGER.debug("aligning %d series at target ratio %.6f", len(envelopes), target)

    aligned: list[AxisRange] = []
    for env, value, ratio, label in zip(envelopes, spec.values_to_align, ratios, spec.labels, strict=True):
        if ratio is None:
            LOGGER.warning("%s is constant at its alignment value %s; returning a zero-span range", label, value)
            aligned.append(env)
            continue
        try:
            aligned.append(stretch_to_ratio(env, value, target, ratio=ratio))
        except DegenerateRange as exc:
            raise DegenerateRange(f"{label}: {exc}") from exc

    ranges = [
        apply_buffers(bounds, upper=upper, lower=lower)
        for bounds, upper, lower in zip(aligned, spec.upper_buffers, spec.lower_buffers, strict=True)
    ]
    return AlignmentResult(ranges=ranges, aligned_ranges=aligned, ratios=ratios, target_ratio=target)


def align(
    series: Sequence[Any],
    values_to_align: Sequence[float] | None = None,
    weights: Sequence[float] | None = None,
    upper_buffers: BufferInput = DEFAULT_BUFFER,
    lower_buffers: BufferInput = DEFAULT_BUFFER,
) -> list[AxisRange]:
    spec = AlignmentSpec.build(
        series,
        values_to_align=values_to_align,
        weights=weights,
        upper_buffers=upper_buffers,
        lower_buffers=lower_buffers,
    )
    return solve_alignment(spec).ranges


def _coerce_floats(values: Sequence[float], field_name: str) -> tuple[float, ...]:
    if isinstance(values, (str, bytes)):
        raise InvalidArgument(f"{field_name} must be a sequence of numbers")
    try:
        items = list(values)
    except TypeError as exc:
        raise InvalidArgument(f"{field_name} must be a sequence of numbers") from exc
    out: list[float] = []
    for item in items:
        try:
            out.append(float(item))
        except (TypeError, ValueError) as exc:
            raise InvalidArgument(f"{field_name} entries must be numeric, got {item!r}") from exc
    return tuple(out)


def _broadcast_buffers(value: BufferInput, n: int, field_name: str) -> tuple[float, ...]:
    if isinstance(value, (int, float, np.floating, np.integer)) and not isinstance(value, bool):
        return (coerce_scalar(value, label=field_name),) * n
    return _coerce_floats(value, field_name)
