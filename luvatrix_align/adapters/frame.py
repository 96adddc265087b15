from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from luvatrix_align.aligner import DEFAULT_BUFFER, AlignmentSpec, BufferInput, solve_alignment
from luvatrix_align.errors import InvalidArgument
from luvatrix_align.pair import DEFAULT_PAIR_BUFFER, PreserveMode, solve_pair
from luvatrix_align.series import AxisRange


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]


def align_columns(
    data: Any,
    columns: Sequence[str],
    *,
    values_to_align: Sequence[float] | None = None,
    weights: Sequence[float] | None = None,
    upper_buffers: BufferInput = DEFAULT_BUFFER,
    lower_buffers: BufferInput = DEFAULT_BUFFER,
) -> dict[str, AxisRange]:
    """Align the named numeric columns of ``data`` and key the ranges by column."""
    names = _column_names(columns)
    spec = AlignmentSpec.build(
        [_resolve_column(data, name) for name in names],
        values_to_align=values_to_align,
        weights=weights,
        upper_buffers=upper_buffers,
        lower_buffers=lower_buffers,
        labels=names,
    )
    result = solve_alignment(spec)
    return dict(zip(names, result.ranges, strict=True))


def align_frame_pair(
    data: Any,
    primary: str,
    secondary: str,
    value_primary: float = 0.0,
    value_secondary: float | None = None,
    *,
    preserve: PreserveMode | None = "neither",
    target_ratio: float | None = None,
    buffer_fraction: float = DEFAULT_PAIR_BUFFER,
) -> dict[str, AxisRange]:
    result = solve_pair(
        _resolve_column(data, primary),
        _resolve_column(data, secondary),
        value_primary,
        value_secondary,
        preserve=preserve,
        target_ratio=target_ratio,
        buffer_fraction=buffer_fraction,
    )
    return {primary: result.primary, secondary: result.secondary}


def _column_names(columns: Sequence[str]) -> list[str]:
    if isinstance(columns, str):
        raise InvalidArgument("columns must be a sequence of column names, not a single string")
    names = list(columns)
    if len(set(names)) != len(names):
        raise InvalidArgument("columns must not repeat")
    return names


def _resolve_column(data: Any, name: str) -> Any:
    if pd is None:
        raise InvalidArgument("pandas is required to align DataFrame columns")
    if not isinstance(data, pd.DataFrame):
        raise InvalidArgument("`data` must be a pandas DataFrame")
    if name not in data.columns:
        raise InvalidArgument(f"column not found: {name}")
    column = data[name]
    if not pd.api.types.is_numeric_dtype(column):
        raise InvalidArgument(f"column {name} must contain numeric data")
    return column
