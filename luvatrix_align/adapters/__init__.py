from .frame import align_columns, align_frame_pair

__all__ = ["align_columns", "align_frame_pair"]
