from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from luvatrix_align import align_pair
from luvatrix_align.adapters import align_columns


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    rng = np.random.default_rng(100)
    frame = pd.DataFrame(
        {
            "Variable_1": rng.normal(-10, 1, 100),
            "Variable_2": rng.normal(0, 1, 100),
            "Variable_3": rng.normal(10, 1, 100),
        }
    )
    ranges = align_columns(
        frame,
        ["Variable_1", "Variable_2", "Variable_3"],
        values_to_align=[-2.0, 0.0, 0.0],
        weights=[0.75, 0.125, 0.125],
    )
    for name, (lo, hi) in ranges.items():
        print(f"{name:>12}  min={lo:10.4f}  max={hi:10.4f}")

    t = np.arange(1, 101)
    primary = np.sin(t / 15) + rng.normal(0, 0.25, t.size)
    secondary = np.sin(t / 15) + rng.normal(1, 0.25, t.size)
    for mode in ("neither", "auto"):
        p, s = align_pair(primary, secondary, 0.0, preserve=mode)
        print(f"{mode:>12}  primary={p}  secondary={s}")


if __name__ == "__main__":
    main()
