from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
import tomllib
from typing import Any

from luvatrix_align.aligner import DEFAULT_BUFFER, AlignmentSpec, BufferInput
from luvatrix_align.errors import InvalidArgument
from luvatrix_align.pair import DEFAULT_PAIR_BUFFER, normalize_preserve


@dataclass(frozen=True)
class AlignmentConfig:
    """Stored defaults for alignment calls, typically read from ``alignment.toml``.

    Example::

        [alignment]
        values_to_align = [-2.0, 0.0, 0.0]
        weights = [0.75, 0.125, 0.125]
        upper_buffer = 0.05
        lower_buffer = [0.05, 0.1, 0.05]

        [alignment.pair]
        preserve = "auto"
        buffer_fraction = 0.1
    """

    values_to_align: tuple[float, ...] | None = None
    weights: tuple[float, ...] | None = None
    upper_buffer: float | tuple[float, ...] = DEFAULT_BUFFER
    lower_buffer: float | tuple[float, ...] = DEFAULT_BUFFER
    preserve: str = "neither"
    target_ratio: float | None = None
    buffer_fraction: float = DEFAULT_PAIR_BUFFER

    def build_spec(self, series: Sequence[Any], labels: Sequence[str] | None = None) -> AlignmentSpec:
        return AlignmentSpec.build(
            series,
            values_to_align=self.values_to_align,
            weights=self.weights,
            upper_buffers=self.upper_buffer,
            lower_buffers=self.lower_buffer,
            labels=labels,
        )

    def pair_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "preserve": self.preserve,
            "target_ratio": self.target_ratio,
            "buffer_fraction": self.buffer_fraction,
        }
        if self.values_to_align is not None:
            if len(self.values_to_align) not in (1, 2):
                raise InvalidArgument("pair alignment takes one or two values_to_align")
            kwargs["value_primary"] = self.values_to_align[0]
            kwargs["value_secondary"] = self.values_to_align[-1]
        return kwargs


def load_alignment_config(path: str | Path) -> AlignmentConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"alignment config not found: {config_path}")
    with config_path.open("rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise InvalidArgument(f"alignment config is not valid TOML: {exc}") from exc
    return parse_alignment_config(raw)


def parse_alignment_config(raw: dict[str, Any]) -> AlignmentConfig:
    table = raw.get("alignment", {})
    if not isinstance(table, dict):
        raise InvalidArgument("[alignment] must be a table")
    pair = table.get("pair", {})
    if not isinstance(pair, dict):
        raise InvalidArgument("[alignment.pair] must be a table")
    preserve = _coerce_optional_str(pair.get("preserve"), "preserve")
    return AlignmentConfig(
        values_to_align=_coerce_optional_floats(table.get("values_to_align"), "values_to_align"),
        weights=_coerce_optional_floats(table.get("weights"), "weights"),
        upper_buffer=_coerce_buffer(table.get("upper_buffer", DEFAULT_BUFFER), "upper_buffer"),
        lower_buffer=_coerce_buffer(table.get("lower_buffer", DEFAULT_BUFFER), "lower_buffer"),
        preserve=normalize_preserve(preserve),
        target_ratio=_coerce_optional_float(pair.get("target_ratio"), "target_ratio"),
        buffer_fraction=_coerce_float(pair.get("buffer_fraction", DEFAULT_PAIR_BUFFER), "buffer_fraction"),
    )


def _coerce_float(value: object, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgument(f"{field_name} must be a number")
    return float(value)


def _coerce_optional_float(value: object, field_name: str) -> float | None:
    if value is None:
        return None
    return _coerce_float(value, field_name)


def _coerce_optional_floats(value: object, field_name: str) -> tuple[float, ...] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        raise InvalidArgument(f"{field_name} must be a list")
    return tuple(_coerce_float(item, f"{field_name} entries") for item in value)


def _coerce_buffer(value: object, field_name: str) -> BufferInput:
    if isinstance(value, list):
        return tuple(_coerce_float(item, f"{field_name} entries") for item in value)
    return _coerce_float(value, field_name)


def _coerce_optional_str(value: object, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgument(f"{field_name} must be a string if provided")
    return value
