from luvatrix_align.aligner import AlignmentResult, AlignmentSpec, align, solve_alignment
from luvatrix_align.config import AlignmentConfig, load_alignment_config
from luvatrix_align.errors import AlignmentAdvisory, AlignmentError, DegenerateRange, Infeasible, InvalidArgument
from luvatrix_align.pair import PairAlignment, align_pair, solve_pair
from luvatrix_align.series import AxisRange

__all__ = [
    "AlignmentAdvisory",
    "AlignmentConfig",
    "AlignmentError",
    "AlignmentResult",
    "AlignmentSpec",
    "AxisRange",
    "DegenerateRange",
    "Infeasible",
    "InvalidArgument",
    "PairAlignment",
    "align",
    "align_pair",
    "load_alignment_config",
    "solve_alignment",
    "solve_pair",
]
