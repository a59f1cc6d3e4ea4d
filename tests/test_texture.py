#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test suite for the gray-level co-occurrence texture extractor.
"""

import math
import unittest
import numpy as np

from leaf_features.core.exceptions import DegenerateInputError, InvalidInputError
from leaf_features.core.image import as_image
from leaf_features.features.texture import (
    TEXTURE_FEATURE_NAMES,
    build_cooccurrence_matrices,
    calculate_directional_statistics,
    calculate_glcm_statistics,
    extract_texture_features,
    normalize_cooccurrence,
    quantize_gray_levels,
)

# Entropy of a matrix with all mass in one cell
SINGLE_CELL_ENTROPY = math.log2(1 + 1e-5)


def gray(value, height, width):
    return np.full((height, width, 3), value, dtype=np.uint8)


def four_color_image():
    """2x2 image: red, green on the top row; blue, black below."""
    return np.array([
        [[255, 0, 0], [0, 255, 0]],
        [[0, 0, 255], [0, 0, 0]],
    ], dtype=np.uint8)


def vertical_stripes(height=6, width=5):
    """Columns alternate between gray 200 (level 7) and gray 16 (level 1)."""
    image = np.empty((height, width, 3), dtype=np.uint8)
    for x in range(width):
        image[:, x] = 200 if x % 2 else 16
    return image


class TestQuantization(unittest.TestCase):
    """Test the reduction to 8 gray levels."""

    def test_level_bounds(self):
        image = np.array([[[0, 0, 0], [255, 255, 255], [100, 100, 100]]], dtype=np.uint8)
        grid = quantize_gray_levels(as_image(image))
        np.testing.assert_array_equal(grid[:, 0], [1, 8, 4])

    def test_luma_weights(self):
        image = np.array([[[255, 0, 0], [0, 255, 0], [0, 0, 255]]], dtype=np.uint8)
        grid = quantize_gray_levels(as_image(image))
        # luma 76.5, 150.45 and 28.05
        np.testing.assert_array_equal(grid[:, 0], [3, 5, 1])

    def test_grid_is_indexed_by_x_then_y(self):
        image = np.zeros((2, 3, 3), dtype=np.uint8)
        image[1, 2] = 255  # x=2, y=1
        grid = quantize_gray_levels(as_image(image))

        self.assertEqual(grid.shape, (3, 2))
        self.assertEqual(grid[2, 1], 8)
        self.assertEqual(int(grid.sum()), 5 + 8)

    def test_explicit_clip_with_custom_width(self):
        image = gray(255, 1, 1)
        grid = quantize_gray_levels(as_image(image), level_width=16)
        self.assertEqual(grid[0, 0], 8)


class TestCooccurrenceMatrices(unittest.TestCase):
    """Test directional matrix accumulation."""

    def setUp(self):
        # grid[x][y]
        self.grid = np.array([
            [1, 2, 3],
            [4, 5, 6],
            [7, 8, 1],
        ])

    def test_pairs_per_direction(self):
        matrices = build_cooccurrence_matrices(self.grid)
        self.assertEqual(matrices.shape, (4, 8, 8))

        expected_cells = {
            0: [(3, 4), (4, 5), (6, 7), (7, 0)],
            1: [(3, 1), (4, 2), (6, 4), (7, 5)],
            2: [(4, 3), (7, 6)],
            3: [(4, 0), (7, 3)],
        }
        for d, cells in expected_cells.items():
            expected = np.zeros((8, 8))
            for i, j in cells:
                expected[i, j] += 1
            np.testing.assert_array_equal(matrices[d], expected, err_msg=f"direction {d}")

    def test_equal_levels_count_twice(self):
        grid = np.full((3, 3), 2)
        matrices = build_cooccurrence_matrices(grid)

        # 4 centers in the 0 and 45 degree directions, 2 with an upper neighbor
        self.assertEqual(matrices[0, 1, 1], 8)
        self.assertEqual(matrices[1, 1, 1], 8)
        self.assertEqual(matrices[2, 1, 1], 4)
        self.assertEqual(matrices[3, 1, 1], 4)
        self.assertEqual(matrices.sum(), 24)

    def test_first_column_and_last_row_are_never_centers(self):
        grid = np.ones((3, 3), dtype=int)
        grid[0, :] = 8   # first column
        grid[:, 2] = 8   # last row
        matrices = build_cooccurrence_matrices(grid)

        # No pair starts at level 8
        self.assertEqual(matrices[:, 7, :].sum(), 0)

    def test_narrow_grids_have_no_pairs(self):
        for shape in [(1, 5), (5, 1), (1, 1)]:
            matrices = build_cooccurrence_matrices(np.ones(shape, dtype=int))
            self.assertEqual(matrices.sum(), 0, msg=f"shape {shape}")

    def test_rejects_out_of_range_levels(self):
        with self.assertRaises(ValueError):
            build_cooccurrence_matrices(np.zeros((3, 3), dtype=int))
        with self.assertRaises(ValueError):
            build_cooccurrence_matrices(np.full((3, 3), 9))

    def test_normalized_matrices_sum_to_one(self):
        matrices = normalize_cooccurrence(build_cooccurrence_matrices(self.grid))
        np.testing.assert_allclose(matrices.sum(axis=(1, 2)), np.ones(4))

    def test_empty_matrix_policies(self):
        raw = np.zeros((2, 8, 8))
        raw[0, 2, 2] = 4

        nan_result = normalize_cooccurrence(raw, "nan")
        self.assertEqual(nan_result[0, 2, 2], 1.0)
        self.assertTrue(np.isnan(nan_result[1]).all())

        zero_result = normalize_cooccurrence(raw, "zero")
        np.testing.assert_array_equal(zero_result[1], np.zeros((8, 8)))

        with self.assertRaises(DegenerateInputError) as ctx:
            normalize_cooccurrence(raw, "raise", direction_names=["0", "45"])
        self.assertEqual(ctx.exception.direction, "45")

    def test_unknown_policy(self):
        with self.assertRaises(ValueError):
            normalize_cooccurrence(np.ones((1, 8, 8)), "ignore")


class TestGlcmStatistics(unittest.TestCase):
    """Test the statistics derived from one normalized matrix."""

    def test_diagonal_matrix(self):
        p = np.zeros((8, 8))
        p[0, 0] = p[1, 1] = 0.5
        stats = calculate_glcm_statistics(p)

        self.assertAlmostEqual(stats["energy"], 0.5)
        self.assertAlmostEqual(stats["contrast"], 0.0)
        self.assertAlmostEqual(stats["entropy"], math.log2(0.5 + 1e-5))
        self.assertAlmostEqual(stats["correlation"], 1.0)

    def test_anti_diagonal_matrix(self):
        p = np.zeros((8, 8))
        p[0, 1] = p[1, 0] = 0.5
        stats = calculate_glcm_statistics(p)

        self.assertAlmostEqual(stats["contrast"], 1.0)
        self.assertAlmostEqual(stats["correlation"], -1.0)

    def test_contrast_uses_squared_level_difference(self):
        p = np.zeros((8, 8))
        p[0, 7] = 1.0
        self.assertAlmostEqual(calculate_glcm_statistics(p)["contrast"], 49.0)

    def test_single_cell_correlation_policies(self):
        p = np.zeros((8, 8))
        p[3, 3] = 1.0

        stats = calculate_glcm_statistics(p, "nan")
        self.assertEqual(stats["energy"], 1.0)
        self.assertEqual(stats["contrast"], 0.0)
        self.assertAlmostEqual(stats["entropy"], SINGLE_CELL_ENTROPY)
        self.assertTrue(math.isnan(stats["correlation"]))

        self.assertEqual(calculate_glcm_statistics(p, "zero")["correlation"], 0.0)

        with self.assertRaises(DegenerateInputError) as ctx:
            calculate_glcm_statistics(p, "raise", direction="90")
        self.assertEqual(ctx.exception.statistic, "correlation")
        self.assertEqual(ctx.exception.direction, "90")

    def test_single_row_is_degenerate(self):
        # All mass on one row: the row levels have zero spread
        p = np.zeros((8, 8))
        p[2, [0, 4, 5]] = [0.2, 0.3, 0.5]
        self.assertTrue(math.isnan(calculate_glcm_statistics(p)["correlation"]))

    def test_nan_matrix_gives_nan_statistics(self):
        stats = calculate_glcm_statistics(np.full((8, 8), np.nan), "raise")
        for value in stats.values():
            self.assertTrue(math.isnan(value))


class TestTextureFeatures(unittest.TestCase):
    """Test the full texture extractor."""

    def test_feature_names(self):
        self.assertEqual(TEXTURE_FEATURE_NAMES, [
            "mean_energy", "mean_contrast", "mean_entropy", "mean_correlation",
            "std_energy", "std_contrast", "std_entropy", "std_correlation",
        ])

    def test_uniform_image(self):
        image = gray(100, 4, 4)
        per_direction = calculate_directional_statistics(image)

        np.testing.assert_array_equal(per_direction["energy"], np.ones(4))
        np.testing.assert_array_equal(per_direction["contrast"], np.zeros(4))
        self.assertTrue(np.isnan(per_direction["correlation"]).all())

        features = extract_texture_features(image)
        self.assertEqual(features.shape, (8,))
        self.assertEqual(features[0], 1.0)
        self.assertEqual(features[1], 0.0)
        self.assertAlmostEqual(features[2], SINGLE_CELL_ENTROPY)
        self.assertTrue(np.isnan(features[3]))
        np.testing.assert_array_equal(features[4:7], np.zeros(3))
        self.assertTrue(np.isnan(features[7]))

    def test_uniform_image_mass_sits_on_one_diagonal_cell(self):
        grid = quantize_gray_levels(as_image(gray(100, 4, 4)))
        matrices = normalize_cooccurrence(build_cooccurrence_matrices(grid))
        for matrix in matrices:
            self.assertEqual(matrix[3, 3], 1.0)
            self.assertEqual(matrix.sum(), 1.0)

    def test_uniform_image_zero_policy(self):
        features = extract_texture_features(gray(100, 4, 4), degenerate_policy="zero")
        self.assertEqual(features[3], 0.0)
        self.assertEqual(features[7], 0.0)

    def test_uniform_image_raise_policy(self):
        with self.assertRaises(DegenerateInputError):
            extract_texture_features(gray(100, 4, 4), degenerate_policy="raise")

    def test_four_color_image(self):
        image = four_color_image()
        grid = quantize_gray_levels(as_image(image))
        matrices = build_cooccurrence_matrices(grid)

        # Only the center (1, 0) has neighbors: level 5 above level 1
        expected = np.zeros((8, 8))
        expected[4, 0] = 1
        np.testing.assert_array_equal(matrices[0], expected)
        np.testing.assert_array_equal(matrices[1], expected)
        self.assertEqual(matrices[2].sum(), 0)
        self.assertEqual(matrices[3].sum(), 0)

        # Empty 90/135 degree matrices poison every summary under 'nan'
        self.assertTrue(np.isnan(extract_texture_features(image)).all())

        zero = extract_texture_features(image, degenerate_policy="zero")
        e = SINGLE_CELL_ENTROPY
        np.testing.assert_allclose(zero, [0.5, 8.0, e / 2, 0.0, 0.5, 8.0, e / 2, 0.0])

        with self.assertRaises(DegenerateInputError) as ctx:
            extract_texture_features(image, degenerate_policy="raise")
        self.assertEqual(ctx.exception.direction, "90")

    def test_one_pixel_wide_image(self):
        # No column right of x=0, so no direction counts a pair
        rng = np.random.default_rng(1)
        image = rng.integers(0, 256, size=(6, 1, 3), dtype=np.uint8)

        self.assertTrue(np.isnan(extract_texture_features(image, degenerate_policy="nan")).all())

        np.testing.assert_array_equal(
            extract_texture_features(image, degenerate_policy="zero"), np.zeros(8)
        )

        with self.assertRaises(DegenerateInputError) as ctx:
            extract_texture_features(image, degenerate_policy="raise")
        self.assertEqual(ctx.exception.direction, "0")
        self.assertIsNone(ctx.exception.statistic)

    def test_degenerate_directions_are_logged(self):
        with self.assertLogs("leaf_features.features.texture", level="DEBUG") as logs:
            extract_texture_features(four_color_image(), degenerate_policy="zero")

        empty = [line for line in logs.output if "no counted pairs" in line]
        self.assertEqual(len(empty), 2)
        self.assertIn("GLCM 90°", empty[0])
        self.assertIn("GLCM 135°", empty[1])
        self.assertTrue(all(line.startswith("DEBUG:") for line in empty))

        undefined = [line for line in logs.output if "correlation undefined" in line]
        self.assertEqual(len(undefined), 4)

    def test_stripes_follow_rotation(self):
        image = vertical_stripes()
        contrast = calculate_directional_statistics(image)["contrast"]
        # Levels 1 and 7 differ by 6
        np.testing.assert_allclose(contrast, [0.0, 36.0, 0.0, 36.0])

        rotated = np.ascontiguousarray(np.rot90(image))
        rotated_contrast = calculate_directional_statistics(rotated)["contrast"]
        np.testing.assert_allclose(rotated_contrast, [36.0, 36.0, 36.0, 36.0])

        self.assertFalse(np.allclose(
            extract_texture_features(image, degenerate_policy="zero"),
            extract_texture_features(rotated, degenerate_policy="zero"),
        ))

    def test_stripes_pair_up_directions(self):
        stats = calculate_directional_statistics(vertical_stripes(), degenerate_policy="zero")
        rotated = calculate_directional_statistics(
            np.ascontiguousarray(np.rot90(vertical_stripes())), degenerate_policy="zero"
        )

        for name in ("energy", "contrast", "entropy", "correlation"):
            # Column-only pattern: 0 pairs with 90, 45 with 135
            self.assertAlmostEqual(stats[name][0], stats[name][2])
            self.assertAlmostEqual(stats[name][1], stats[name][3])
            # Row-only pattern: 0 pairs with 45, 90 with 135
            self.assertAlmostEqual(rotated[name][0], rotated[name][1])
            self.assertAlmostEqual(rotated[name][2], rotated[name][3])

    def test_random_image(self):
        rng = np.random.default_rng(5)
        image = rng.integers(0, 256, size=(16, 16, 3), dtype=np.uint8)

        per_direction = calculate_directional_statistics(image)
        self.assertTrue(np.all(np.abs(per_direction["correlation"]) <= 1 + 1e-9))
        self.assertTrue(np.all(per_direction["energy"] > 0))
        self.assertTrue(np.all(per_direction["entropy"] < 0))

        features = extract_texture_features(image)
        self.assertFalse(np.isnan(features).any())
        np.testing.assert_allclose(
            features[:4],
            [per_direction[name].mean() for name in ("energy", "contrast", "entropy", "correlation")],
        )
        np.testing.assert_allclose(
            features[4:],
            [per_direction[name].std() for name in ("energy", "contrast", "entropy", "correlation")],
        )

    def test_deterministic(self):
        rng = np.random.default_rng(9)
        image = rng.integers(0, 256, size=(10, 12, 3), dtype=np.uint8)
        np.testing.assert_array_equal(
            extract_texture_features(image), extract_texture_features(image)
        )

    def test_zero_area_image_is_rejected(self):
        with self.assertRaises(InvalidInputError):
            extract_texture_features(np.zeros((0, 3, 3), dtype=np.uint8))


if __name__ == '__main__':
    unittest.main()
