from __future__ import annotations

import math
import unittest

import numpy as np

from luvatrix_align import AlignmentSpec, DegenerateRange, InvalidArgument, align, solve_alignment
from luvatrix_align.series import AxisRange


def _ratio(bounds: AxisRange, value: float) -> float:
    return (value - bounds.minimum) / (bounds.maximum - bounds.minimum)


class RangeAlignerTests(unittest.TestCase):
    def test_already_aligned_series_are_only_padded(self) -> None:
        a = list(range(10))
        b = list(range(10, 20))
        result = solve_alignment(AlignmentSpec.build([a, b], values_to_align=[5.0, 15.0]))

        self.assertAlmostEqual(result.target_ratio, 5.0 / 9.0, places=12)
        self.assertEqual(result.aligned_ranges, [AxisRange(0.0, 9.0), AxisRange(10.0, 19.0)])
        (lo_a, hi_a), (lo_b, hi_b) = result.ranges
        self.assertAlmostEqual(lo_a, -0.45, places=12)
        self.assertAlmostEqual(hi_a, 9.45, places=12)
        self.assertAlmostEqual(lo_b, 9.55, places=12)
        self.assertAlmostEqual(hi_b, 19.45, places=12)

    def test_opposite_end_ratios_meet_in_the_middle(self) -> None:
        ranges = align([[0.0, 10.0], [0.0, 10.0]], values_to_align=[0.0, 10.0], weights=[0.5, 0.5],
                       upper_buffers=0.0, lower_buffers=0.0)
        self.assertEqual(ranges[0], AxisRange(-10.0, 10.0))
        self.assertEqual(ranges[1], AxisRange(0.0, 20.0))
        self.assertEqual(_ratio(ranges[0], 0.0), 0.5)
        self.assertEqual(_ratio(ranges[1], 10.0), 0.5)

    def test_range_is_extended_to_contain_alignment_value(self) -> None:
        result = solve_alignment(
            AlignmentSpec.build([[1.0, 2.0, 3.0], [-1.0, 1.0]], upper_buffers=0.0, lower_buffers=0.0)
        )
        self.assertEqual(result.ratios, [0.0, 0.5])
        self.assertEqual(result.target_ratio, 0.25)
        self.assertEqual(result.aligned_ranges[0], AxisRange(-1.0, 3.0))
        self.assertEqual(result.aligned_ranges[1], AxisRange(-1.0, 3.0))

    def test_alignment_invariant_and_envelope_for_random_inputs(self) -> None:
        rng = np.random.default_rng(100)
        for _ in range(25):
            n = int(rng.integers(2, 6))
            series = [rng.normal(rng.uniform(-20, 20), rng.uniform(0.5, 5.0), size=50) for _ in range(n)]
            values = rng.uniform(-25, 25, size=n).tolist()
            weights = rng.uniform(0.0, 1.0, size=n).tolist()
            result = solve_alignment(
                AlignmentSpec.build(series, values_to_align=values, weights=weights, upper_buffers=0.1, lower_buffers=0.2)
            )
            for data, value, bounds, final in zip(series, values, result.aligned_ranges, result.ranges, strict=True):
                self.assertTrue(math.isclose(_ratio(bounds, value), result.target_ratio, rel_tol=1e-9, abs_tol=1e-12))
                self.assertLessEqual(bounds.minimum, float(np.min(data)))
                self.assertGreaterEqual(bounds.maximum, float(np.max(data)))
                self.assertLessEqual(final.minimum, bounds.minimum)
                self.assertGreaterEqual(final.maximum, bounds.maximum)

    def test_reference_example_weights_first_variable(self) -> None:
        rng = np.random.default_rng(100)
        v1 = rng.normal(-10, 1, size=100)
        v2 = rng.normal(0, 1, size=100)
        v3 = rng.normal(10, 1, size=100)
        result = solve_alignment(
            AlignmentSpec.build([v1, v2, v3], values_to_align=[-2.0, 0.0, 0.0], weights=[0.75, 0.125, 0.125])
        )
        # -2 lies above all of v1 and 0 below all of v3, so their ratios sit at the ends.
        self.assertEqual(result.ratios[0], 1.0)
        self.assertEqual(result.ratios[2], 0.0)
        expected = 0.75 * 1.0 + 0.125 * result.ratios[1] + 0.125 * 0.0
        self.assertAlmostEqual(result.target_ratio, expected, places=12)
        self.assertEqual(result.aligned_ranges[0].minimum, float(np.min(v1)))
        self.assertGreater(result.aligned_ranges[0].maximum, -2.0)
        self.assertEqual(result.aligned_ranges[2].maximum, float(np.max(v3)))
        self.assertLess(result.aligned_ranges[2].minimum, 0.0)

    def test_non_finite_samples_are_ignored(self) -> None:
        data = [math.nan, 1.0, math.inf, 5.0, -math.inf]
        ranges = align([data, [1.0, 5.0]], values_to_align=[3.0, 3.0], upper_buffers=0.0, lower_buffers=0.0)
        self.assertEqual(ranges[0], AxisRange(1.0, 5.0))

    def test_accepts_numpy_and_none_entries(self) -> None:
        ranges = align([np.asarray([0, 4], dtype=np.int32), [None, 2.0, 6.0]], values_to_align=[2.0, 4.0],
                       upper_buffers=0.0, lower_buffers=0.0)
        self.assertEqual(ranges, [AxisRange(0.0, 4.0), AxisRange(2.0, 6.0)])

    def test_zero_weight_series_is_still_rescaled(self) -> None:
        series = [[0.0, 10.0], [0.0, 10.0], [0.0, 10.0]]
        values = [2.0, 4.0, 9.0]
        result = solve_alignment(
            AlignmentSpec.build(series, values_to_align=values, weights=[1.0, 1.0, 0.0],
                                upper_buffers=0.0, lower_buffers=0.0)
        )
        self.assertAlmostEqual(result.target_ratio, 0.3, places=12)
        self.assertAlmostEqual(_ratio(result.aligned_ranges[2], 9.0), 0.3, places=12)
        self.assertEqual(result.aligned_ranges[2].minimum, 0.0)
        self.assertAlmostEqual(result.aligned_ranges[2].maximum, 30.0, places=9)

        without = solve_alignment(
            AlignmentSpec.build(series[:2], values_to_align=values[:2], upper_buffers=0.0, lower_buffers=0.0)
        )
        self.assertAlmostEqual(without.target_ratio, result.target_ratio, places=12)

    def test_larger_buffer_widens_span_without_moving_aligned_range(self) -> None:
        series = [[0.0, 3.0, 7.0], [-4.0, 1.0]]
        narrow = solve_alignment(AlignmentSpec.build(series, upper_buffers=0.05))
        wide = solve_alignment(AlignmentSpec.build(series, upper_buffers=[0.2, 0.05]))
        self.assertEqual(narrow.aligned_ranges, wide.aligned_ranges)
        self.assertGreater(wide.ranges[0].span, narrow.ranges[0].span)
        self.assertEqual(wide.ranges[1], narrow.ranges[1])

    def test_constant_series_at_alignment_value_returns_single_point(self) -> None:
        with self.assertLogs("luvatrix_align.aligner", level="WARNING") as logs:
            result = solve_alignment(
                AlignmentSpec.build([[3.0, 3.0], [0.0, 10.0]], values_to_align=[3.0, 5.0])
            )
        self.assertIn("constant", logs.output[0])
        self.assertIsNone(result.ratios[0])
        self.assertEqual(result.ranges[0], AxisRange(3.0, 3.0))
        self.assertEqual(result.target_ratio, 0.5)

    def test_weight_only_on_constant_series_is_degenerate(self) -> None:
        with self.assertRaises(DegenerateRange):
            align([[2.0, 2.0], [0.0, 1.0]], values_to_align=[2.0, 0.5], weights=[1.0, 0.0])

    def test_target_ratio_zero_requiring_infinite_stretch_is_degenerate(self) -> None:
        with self.assertRaises(DegenerateRange):
            align([[0.0, 10.0], [0.0, 10.0]], values_to_align=[0.0, 5.0], weights=[1.0, 0.0])

    def test_target_ratio_one_from_uneven_weights_is_degenerate(self) -> None:
        series = [[0.0, 10.0]] * 4
        result = solve_alignment(
            AlignmentSpec.build(series[:3], values_to_align=[10.0, 10.0, 10.0], weights=[0.1, 0.2, 0.3])
        )
        self.assertEqual(result.target_ratio, 1.0)
        with self.assertRaises(DegenerateRange):
            align(series, values_to_align=[10.0, 10.0, 10.0, 5.0], weights=[0.1, 0.2, 0.3, 0.0],
                  upper_buffers=0.0, lower_buffers=0.0)

    def test_target_ratio_stays_within_weighted_ratios(self) -> None:
        rng = np.random.default_rng(7)
        for _ in range(200):
            weights = rng.uniform(0.01, 1.0, size=3).tolist()
            result = solve_alignment(
                AlignmentSpec.build([[0.0, 10.0]] * 3, values_to_align=[4.0, 4.0, 4.0], weights=weights)
            )
            self.assertEqual(result.target_ratio, 0.4)

    def test_target_ratio_zero_without_stretch_is_allowed(self) -> None:
        ranges = align([[0.0, 10.0], [5.0, 8.0]], values_to_align=[0.0, 5.0], upper_buffers=0.0, lower_buffers=0.0)
        self.assertEqual(ranges, [AxisRange(0.0, 10.0), AxisRange(5.0, 8.0)])

    def test_validation_errors(self) -> None:
        ok = [[0.0, 1.0], [2.0, 3.0]]
        cases = [
            dict(series=[[0.0, 1.0]]),
            dict(series=ok, values_to_align=[0.0]),
            dict(series=ok, values_to_align=[0.0, math.inf]),
            dict(series=ok, weights=[1.0]),
            dict(series=ok, weights=[-1.0, 2.0]),
            dict(series=ok, weights=[0.0, 0.0]),
            dict(series=ok, weights=[math.nan, 1.0]),
            dict(series=ok, upper_buffers=1.5),
            dict(series=ok, lower_buffers=[0.1, -0.1]),
            dict(series=ok, lower_buffers=[0.1]),
            dict(series=[[math.nan, math.inf], [1.0, 2.0]]),
            dict(series=[[], [1.0, 2.0]]),
            dict(series=[["a", 1.0], [1.0, 2.0]]),
            dict(series="abc"),
        ]
        for kwargs in cases:
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(InvalidArgument):
                    align(**kwargs)

    def test_nested_series_is_rejected_instead_of_flattened(self) -> None:
        with self.assertRaises(InvalidArgument):
            align([[[0.0, 1.0], [5.0, 9.0]], [0.0, 1.0]], values_to_align=[2.0, 0.5])

    def test_errors_are_value_errors(self) -> None:
        with self.assertRaises(ValueError):
            align([[0.0, 1.0]])


if __name__ == "__main__":
    unittest.main()
