#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Texture feature extraction module.

This module handles the calculation of gray-level co-occurrence (GLCM) texture
features from RGB images. The image is reduced to 8 gray levels, four
directional co-occurrence matrices (0°, 45°, 90°, 135°) are accumulated and
normalized, and energy, contrast, entropy and correlation are derived from
each one. The four directional values of each statistic are then summarized
by their mean and population standard deviation, giving an 8-element vector:

    [mean_energy, mean_contrast, mean_entropy, mean_correlation,
     std_energy, std_contrast, std_entropy, std_correlation]

Degenerate cases (a direction without any counted pair, or a correlation
whose denominator is zero) follow the configured policy: 'nan' reports NaN
for the affected statistic, 'zero' defines 0/0 as 0, and 'raise' raises
`DegenerateInputError`.
"""
import numpy as np
from typing import Dict, Tuple, Any, Optional, List, Sequence

from leaf_features.core.config import TEXTURE_CONFIG
from leaf_features.core.exceptions import DegenerateInputError
from leaf_features.core.image import RGBImage, as_image, require_nonempty
from leaf_features.core.logging_config import get_module_logger
from leaf_features.utils.utils import timer

# Initialize logger
logger = get_module_logger(__name__)

TEXTURE_STATISTICS: Tuple[str, ...] = ("energy", "contrast", "entropy", "correlation")

TEXTURE_FEATURE_NAMES: List[str] = (
    [f"mean_{stat}" for stat in TEXTURE_STATISTICS]
    + [f"std_{stat}" for stat in TEXTURE_STATISTICS]
)

DEGENERATE_POLICIES = ("nan", "zero", "raise")

# Below this a level standard deviation is treated as zero; normalization
# rounding leaves ~1e-16 residue on single-level rows or columns
STD_TOLERANCE = 1e-10


def _resolve_policy(policy: Optional[str]) -> str:
    if policy is None:
        policy = TEXTURE_CONFIG.get("degenerate_policy", "nan")
    if policy not in DEGENERATE_POLICIES:
        raise ValueError(
            f"Unknown degenerate policy '{policy}', expected one of {DEGENERATE_POLICIES}"
        )
    return policy


def _direction_names(directions: Optional[Sequence] = None) -> List[str]:
    if directions is None:
        directions = TEXTURE_CONFIG["directions"]
    return [str(name) for name, _, _ in directions]


def quantize_gray_levels(
    image: RGBImage,
    luma_weights: Optional[Tuple[float, float, float]] = None,
    level_width: Optional[float] = None,
    gray_levels: Optional[int] = None
) -> np.ndarray:
    """
    Reduce an RGB image to a grid of gray levels.

    Parameters
    ----------
    image : RGBImage
        Input image.
    luma_weights : tuple, optional
        Weights of r, g, b in the luma sum, by default (0.30, 0.59, 0.11).
    level_width : float, optional
        Luma units per gray level, by default 32.
    gray_levels : int, optional
        Number of gray levels, by default 8.

    Returns
    -------
    np.ndarray
        Integer array of shape (width, height), indexed ``[x, y]``, holding
        ``floor(luma / level_width) + 1`` clipped to [1, gray_levels].
    """
    if luma_weights is None:
        luma_weights = TEXTURE_CONFIG.get("luma_weights", (0.30, 0.59, 0.11))
    if level_width is None:
        level_width = TEXTURE_CONFIG.get("level_width", 32)
    if gray_levels is None:
        gray_levels = TEXTURE_CONFIG.get("gray_levels", 8)

    wr, wg, wb = luma_weights
    rgb = image.pixels.astype(np.float64)
    luma = wr * rgb[..., 0] + wg * rgb[..., 1] + wb * rgb[..., 2]

    levels = np.floor(luma / level_width).astype(np.int64) + 1
    levels = np.clip(levels, 1, gray_levels)

    # Pixels are stored [y, x]; the grid is addressed [x, y]
    return levels.T


def build_cooccurrence_matrices(
    grid: np.ndarray,
    directions: Optional[Sequence[Tuple[str, int, int]]] = None,
    gray_levels: Optional[int] = None,
    diagonal_weight: Optional[int] = None
) -> np.ndarray:
    """
    Accumulate directional gray-level co-occurrence matrices.

    Parameters
    ----------
    grid : np.ndarray
        Gray-level grid of shape (width, height) with levels in
        [1, gray_levels], as returned by `quantize_gray_levels`.
    directions : sequence, optional
        ``(name, dx, dy)`` neighbor offsets, by default 0°: (0, 1),
        45°: (-1, 1), 90°: (0, -1), 135°: (-1, -1).
    gray_levels : int, optional
        Number of gray levels, by default 8.
    diagonal_weight : int, optional
        Increment for a pair of equal levels, by default 2. Unequal pairs
        always add 1.

    Returns
    -------
    np.ndarray
        Raw counts of shape (n_directions, gray_levels, gray_levels). Entry
        ``[d, i, j]`` counts centers at level ``i + 1`` whose neighbor in
        direction ``d`` is at level ``j + 1``.

    Notes
    -----
    Centers are taken from columns ``1 .. width-1`` and rows
    ``0 .. height-2`` only. Neighbors falling outside the grid are skipped,
    so the 90° and 135° directions never count the first row.
    """
    if directions is None:
        directions = TEXTURE_CONFIG["directions"]
    if gray_levels is None:
        gray_levels = TEXTURE_CONFIG.get("gray_levels", 8)
    if diagonal_weight is None:
        diagonal_weight = TEXTURE_CONFIG.get("diagonal_weight", 2)

    grid = np.asarray(grid)
    if grid.ndim != 2:
        raise ValueError(f"Gray-level grid must be 2D, got shape {grid.shape}")
    if grid.size and (grid.min() < 1 or grid.max() > gray_levels):
        raise ValueError(f"Gray levels must lie in [1, {gray_levels}]")

    width, height = grid.shape
    matrices = np.zeros((len(directions), gray_levels, gray_levels), dtype=np.float64)

    xs, ys = np.meshgrid(
        np.arange(1, width), np.arange(0, height - 1), indexing="ij"
    )
    xs = xs.ravel()
    ys = ys.ravel()

    for d, (name, dx, dy) in enumerate(directions):
        nx = xs + dx
        ny = ys + dy
        valid = (nx >= 0) & (nx < width) & (ny >= 0) & (ny < height)

        centers = grid[xs[valid], ys[valid]] - 1
        neighbors = grid[nx[valid], ny[valid]] - 1
        weights = np.where(centers == neighbors, diagonal_weight, 1)

        np.add.at(matrices[d], (centers, neighbors), weights)
        logger.debug(f"GLCM {name}°: {int(valid.sum())} pairs, total weight {matrices[d].sum():g}")

    return matrices


def normalize_cooccurrence(
    matrices: np.ndarray,
    degenerate_policy: Optional[str] = None,
    direction_names: Optional[Sequence[str]] = None
) -> np.ndarray:
    """
    Normalize each co-occurrence matrix so its entries sum to 1.

    Parameters
    ----------
    matrices : np.ndarray
        Raw counts of shape (n_directions, levels, levels).
    degenerate_policy : str, optional
        Handling of an all-zero matrix: 'nan' fills it with NaN, 'zero'
        leaves it at zero, 'raise' raises `DegenerateInputError`.
    direction_names : sequence of str, optional
        Names used in log and error messages.

    Returns
    -------
    np.ndarray
        Normalized matrices, same shape as the input.
    """
    policy = _resolve_policy(degenerate_policy)
    matrices = np.asarray(matrices, dtype=np.float64)
    if direction_names is None:
        direction_names = [str(d) for d in range(len(matrices))]

    normalized = np.zeros_like(matrices)
    for d, matrix in enumerate(matrices):
        total = matrix.sum()
        if total > 0:
            normalized[d] = matrix / total
            continue

        name = direction_names[d]
        logger.debug(f"GLCM {name}° has no counted pairs (policy: {policy})")
        if policy == "raise":
            raise DegenerateInputError(
                f"Co-occurrence matrix for direction {name}° is empty",
                direction=name,
            )
        if policy == "nan":
            normalized[d] = np.nan

    return normalized


def calculate_glcm_statistics(
    matrix: np.ndarray,
    degenerate_policy: Optional[str] = None,
    entropy_epsilon: Optional[float] = None,
    direction: Optional[str] = None
) -> Dict[str, float]:
    """
    Calculate texture statistics of one normalized co-occurrence matrix.

    Parameters
    ----------
    matrix : np.ndarray
        Normalized square matrix p indexed by 0-based levels i (row) and
        j (column).
    degenerate_policy : str, optional
        Handling of a zero correlation denominator.
    entropy_epsilon : float, optional
        Offset inside the logarithm, by default 1e-5.
    direction : str, optional
        Direction name used in log and error messages.

    Returns
    -------
    dict
        - energy: sum(p^2)
        - contrast: sum((i - j)^2 p)
        - entropy: sum(p log2(p + eps))
        - correlation: (sum(i j p) - ux uy) / (ax ay)
    """
    policy = _resolve_policy(degenerate_policy)
    if entropy_epsilon is None:
        entropy_epsilon = TEXTURE_CONFIG.get("entropy_epsilon", 1e-5)

    p = np.asarray(matrix, dtype=np.float64)
    i, j = np.indices(p.shape)

    energy = np.sum(p ** 2)
    contrast = np.sum((i - j) ** 2 * p)
    entropy = np.sum(p * np.log2(p + entropy_epsilon))

    ux = np.sum(i * p)
    uy = np.sum(j * p)
    ax = np.sqrt(np.sum((i - ux) ** 2 * p))
    ay = np.sqrt(np.sum((j - uy) ** 2 * p))

    if np.isnan(ax) or np.isnan(ay):
        correlation = np.nan
    elif ax <= STD_TOLERANCE or ay <= STD_TOLERANCE:
        logger.debug(f"GLCM {direction}° correlation undefined: ax={ax:g}, ay={ay:g} "
                     f"(policy: {policy})")
        if policy == "raise":
            raise DegenerateInputError(
                f"Correlation for direction {direction}° has a zero denominator",
                direction=direction,
                statistic="correlation",
            )
        correlation = np.nan if policy == "nan" else 0.0
    else:
        correlation = (np.sum(i * j * p) - ux * uy) / (ax * ay)

    return {
        "energy": float(energy),
        "contrast": float(contrast),
        "entropy": float(entropy),
        "correlation": float(correlation),
    }


def calculate_directional_statistics(
    image: Any,
    degenerate_policy: Optional[str] = None
) -> Dict[str, np.ndarray]:
    """
    Calculate the GLCM statistics of each direction.

    Parameters
    ----------
    image : RGBImage, np.ndarray or image-like
        Input image.
    degenerate_policy : str, optional
        'nan', 'zero' or 'raise'. If None, uses TEXTURE_CONFIG.

    Returns
    -------
    dict
        Maps each statistic name to an array with one value per direction,
        in the configured direction order (0°, 45°, 90°, 135°).
    """
    policy = _resolve_policy(degenerate_policy)
    image = require_nonempty(as_image(image))

    directions = TEXTURE_CONFIG["directions"]
    names = _direction_names(directions)

    grid = quantize_gray_levels(image)
    raw = build_cooccurrence_matrices(grid, directions=directions)
    normalized = normalize_cooccurrence(raw, policy, names)

    per_direction = [
        calculate_glcm_statistics(matrix, policy, direction=name)
        for matrix, name in zip(normalized, names)
    ]

    return {
        stat: np.array([values[stat] for values in per_direction], dtype=np.float64)
        for stat in TEXTURE_STATISTICS
    }


@timer
def extract_texture_features(
    image: Any,
    degenerate_policy: Optional[str] = None
) -> np.ndarray:
    """
    Extract the GLCM texture vector of an image.

    Parameters
    ----------
    image : RGBImage, np.ndarray or image-like
        Decoded image, see `leaf_features.core.image.as_image`.
    degenerate_policy : str, optional
        'nan', 'zero' or 'raise'. If None, uses TEXTURE_CONFIG.

    Returns
    -------
    np.ndarray
        float64 array of length 8 ordered as `TEXTURE_FEATURE_NAMES`.

    Raises
    ------
    InvalidInputError
        If the image has zero width or height.
    DegenerateInputError
        Under the 'raise' policy, when a statistic is undefined.
    """
    image = require_nonempty(as_image(image))
    logger.debug(f"Extracting GLCM texture features from {image.width}x{image.height} image")

    stats = calculate_directional_statistics(image, degenerate_policy)

    means = [np.mean(stats[stat]) for stat in TEXTURE_STATISTICS]
    stds = [np.std(stats[stat]) for stat in TEXTURE_STATISTICS]
    features = np.array(means + stds, dtype=np.float64)

    if np.isnan(features).any():
        logger.debug(f"Texture vector contains {int(np.isnan(features).sum())} NaN values")

    return features
