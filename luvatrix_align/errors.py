from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


AdvisoryKind = Literal["out_of_visible_range"]


class AlignmentError(ValueError):
    """Base class for every failure raised while aligning axis ranges."""


class InvalidArgument(AlignmentError):
    pass


class DegenerateRange(AlignmentError):
    pass


class Infeasible(AlignmentError):
    """Target ratio cannot be reached by stretching an axis outward only.

    ``axis`` names the axis that could not be fitted and ``direction`` is the
    side of the plotting region ("above" or "below") the alignment value would
    have to move to for the configuration to work.
    """

    def __init__(self, message: str, *, axis: str, direction: str) -> None:
        super().__init__(message)
        self.axis = axis
        self.direction = direction


@dataclass(frozen=True)
class AlignmentAdvisory:
    kind: AdvisoryKind
    axis: str
    message: str
