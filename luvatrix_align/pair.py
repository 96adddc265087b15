from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Literal

from luvatrix_align.aligner import AlignmentSpec, solve_alignment
from luvatrix_align.errors import AlignmentAdvisory, DegenerateRange, Infeasible, InvalidArgument
from luvatrix_align.series import (
    AxisRange,
    apply_buffers,
    as_float_array,
    coerce_scalar,
    finite_envelope,
    stretch_to_ratio,
)

LOGGER = logging.getLogger(__name__)

PreserveMode = Literal["neither", "primary", "secondary", "auto"]

PAIR_AXES = ("primary", "secondary")
DEFAULT_PAIR_BUFFER = 0.10


@dataclass(frozen=True)
class PairAlignment:
    primary: AxisRange
    secondary: AxisRange
    primary_aligned: AxisRange
    secondary_aligned: AxisRange
    target_ratio: float
    preserved: str | None = None
    advisories: tuple[AlignmentAdvisory, ...] = field(default_factory=tuple)

    @property
    def ranges(self) -> tuple[AxisRange, AxisRange]:
        return (self.primary, self.secondary)


def solve_pair(
    primary: Any,
    secondary: Any,
    value_primary: float = 0.0,
    value_secondary: float | None = None,
    *,
    preserve: PreserveMode | None = "neither",
    target_ratio: float | None = None,
    buffer_fraction: float = DEFAULT_PAIR_BUFFER,
) -> PairAlignment:
    """Align one value on a primary and a secondary vertical axis.

    ``preserve`` keeps one axis at its natural data range and pushes all the
    rescaling onto the other; ``"auto"`` preserves whichever axis already has
    its alignment value nearer the middle. ``target_ratio`` fixes the common
    height explicitly. ``buffer_fraction`` is the total blank margin, split
    evenly between the top and the bottom of each axis.
    """
    mode = normalize_preserve(preserve)
    if value_secondary is None:
        value_secondary = value_primary
    values = (
        coerce_scalar(value_primary, label="value_primary"),
        coerce_scalar(value_secondary, label="value_secondary"),
    )
    buffer_fraction = coerce_scalar(buffer_fraction, label="buffer_fraction")
    if not 0.0 <= buffer_fraction <= 1.0:
        raise InvalidArgument("buffer_fraction must be between 0 and 1 (inclusive)")
    half_buffer = buffer_fraction / 2.0
    if target_ratio is not None:
        target_ratio = coerce_scalar(target_ratio, label="target_ratio")

    if mode == "neither" and target_ratio is None:
        return _solve_blended(primary, secondary, values, half_buffer)

    envelopes = tuple(
        finite_envelope(as_float_array(data, label=axis), label=axis)
        for data, axis in zip((primary, secondary), PAIR_AXES, strict=True)
    )

    preserved: str | None = None
    if mode == "auto":
        preserved = _pick_preserved_axis(envelopes, values)
    elif mode != "neither":
        preserved = mode

    if preserved is not None:
        keep = PAIR_AXES.index(preserved)
        other = 1 - keep
        own = envelopes[keep]
        if own.span == 0:
            raise DegenerateRange(f"{preserved} has zero span; its scale cannot be preserved")
        natural = own.ratio_of(values[keep])
        if target_ratio is not None and target_ratio != natural:
            raise InvalidArgument(
                f"target_ratio {target_ratio!r} conflicts with preserved {preserved} axis ratio {natural!r}"
            )
        target = natural
        aligned = [own, own]
        aligned[other] = _fit_axis(envelopes[other], values[other], target, PAIR_AXES[other])
    else:
        assert target_ratio is not None
        target = target_ratio
        aligned = [
            _fit_axis(env, value, target, axis)
            for env, value, axis in zip(envelopes, values, PAIR_AXES, strict=True)
        ]

    advisories: tuple[AlignmentAdvisory, ...] = ()
    if not 0.0 <= target <= 1.0:
        axis = preserved if preserved is not None else "both"
        message = f"target ratio {target:.6g} lies outside [0, 1]; the aligned value is outside the visible range"
        LOGGER.warning("%s: %s", axis, message)
        advisories = (AlignmentAdvisory(kind="out_of_visible_range", axis=axis, message=message),)
    LOGGER.debug("pair aligned at target ratio %.6f (preserved=%s)", target, preserved)

    final = [apply_buffers(bounds, upper=half_buffer, lower=half_buffer) for bounds in aligned]
    return PairAlignment(
        primary=final[0],
        secondary=final[1],
        primary_aligned=aligned[0],
        secondary_aligned=aligned[1],
        target_ratio=target,
        preserved=preserved,
        advisories=advisories,
    )


def align_pair(
    primary: Any,
    secondary: Any,
    value_primary: float = 0.0,
    value_secondary: float | None = None,
    *,
    preserve: PreserveMode | None = "neither",
    target_ratio: float | None = None,
    buffer_fraction: float = DEFAULT_PAIR_BUFFER,
) -> tuple[AxisRange, AxisRange]:
    return solve_pair(
        primary,
        secondary,
        value_primary,
        value_secondary,
        preserve=preserve,
        target_ratio=target_ratio,
        buffer_fraction=buffer_fraction,
    ).ranges


def _solve_blended(primary: Any, secondary: Any, values: tuple[float, float], half_buffer: float) -> PairAlignment:
    spec = AlignmentSpec.build(
        [primary, secondary],
        values_to_align=values,
        weights=(0.5, 0.5),
        upper_buffers=half_buffer,
        lower_buffers=half_buffer,
        labels=PAIR_AXES,
    )
    result = solve_alignment(spec)
    if not 0.0 < result.target_ratio < 1.0:
        raise InvalidArgument(
            f"mean alignment ratio {result.target_ratio:.6g} is not strictly between 0 and 1; "
            "pass target_ratio or a preserve mode"
        )
    return PairAlignment(
        primary=result.ranges[0],
        secondary=result.ranges[1],
        primary_aligned=result.aligned_ranges[0],
        secondary_aligned=result.aligned_ranges[1],
        target_ratio=result.target_ratio,
    )


def _fit_axis(envelope: AxisRange, value: float, target: float, axis: str) -> AxisRange:
    if 0.0 <= target <= 1.0:
        hull = envelope.extended_to(value)
        if hull.span == 0:
            LOGGER.warning("%s is constant at its alignment value %s; returning a zero-span range", axis, value)
            return hull
        try:
            return stretch_to_ratio(hull, value, target)
        except DegenerateRange as exc:
            raise DegenerateRange(f"{axis}: {exc}") from exc

    # Outside [0, 1] the alignment value must stay outside the data, and
    # outward stretching can only pull its ratio back towards the data.
    if envelope.span == 0 and value == envelope.minimum:
        raise Infeasible(
            f"{axis} data sits on its alignment value {value!r}; it cannot be placed at ratio {target:.6g}",
            axis=axis,
            direction="below" if target < 0 else "above",
        )
    ratio = envelope.ratio_of(value)
    if target < 0.0 and not ratio <= target:
        raise Infeasible(
            f"{axis} cannot place {value!r} below its plot at ratio {target:.6g} without shrinking its range "
            f"(natural ratio {ratio:.6g})",
            axis=axis,
            direction="below",
        )
    if target > 1.0 and not ratio >= target:
        raise Infeasible(
            f"{axis} cannot place {value!r} above its plot at ratio {target:.6g} without shrinking its range "
            f"(natural ratio {ratio:.6g})",
            axis=axis,
            direction="above",
        )
    return stretch_to_ratio(envelope, value, target, ratio=ratio)


def _pick_preserved_axis(envelopes: tuple[AxisRange, ...], values: tuple[float, float]) -> str:
    # The axis whose value already sits nearer mid-height keeps its scale.
    off_center = [abs(0.5 - env.ratio_of(value)) for env, value in zip(envelopes, values, strict=True)]
    return "secondary" if off_center[0] > off_center[1] else "primary"


def normalize_preserve(preserve: str | None) -> str:
    if preserve is None:
        return "neither"
    mode = str(preserve).strip().lower()
    if mode not in {"neither", "primary", "secondary", "auto"}:
        raise InvalidArgument(f"unsupported preserve mode: {preserve!r}")
    return mode
