#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Color feature extraction module.

This module computes the color-moment descriptor of an RGB image: every pixel
is mapped to an HSI (hue, saturation, intensity) triple with the coordinate
transform method, and the first three central moments of each channel are
reported, giving a 9-element vector:

    [meanH, stdH, skewH, meanS, stdS, skewS, meanI, stdI, skewI]
"""
import warnings
from typing import Any, List

import numpy as np
from scipy import stats

from leaf_features.core.image import as_image, require_nonempty
from leaf_features.core.logging_config import get_module_logger
from leaf_features.utils.utils import timer

# Initialize logger
logger = get_module_logger(__name__)

HSI_CHANNELS = ("h", "s", "i")
MOMENT_NAMES = ("mean", "std", "skew")

COLOR_FEATURE_NAMES: List[str] = [
    f"{moment}_{channel}" for channel in HSI_CHANNELS for moment in MOMENT_NAMES
]

_SQRT3 = np.sqrt(3.0)
_SQRT6 = np.sqrt(6.0)


def rgb_to_hsi(rgb: np.ndarray) -> np.ndarray:
    """
    Convert RGB values to HSI with the coordinate transform method.

    Parameters
    ----------
    rgb : np.ndarray
        Array of shape (..., 3) with r, g, b values in [0, 255].

    Returns
    -------
    np.ndarray
        Array of shape (..., 3) with h (radians, in [0, 2π)), s and i.

    Notes
    -----
    When ``g == b`` the hue angle is 0 by definition. The ``g >= b`` branch
    is taken at equality, so achromatic pixels get ``h = 0``.
    """
    rgb = np.asarray(rgb, dtype=np.float64)
    r = rgb[..., 0]
    g = rgb[..., 1]
    b = rgb[..., 2]

    g_minus_b = g - b
    equal = g_minus_b == 0
    denominator = _SQRT3 * np.where(equal, 1.0, g_minus_b)
    angle = np.where(equal, 0.0, np.pi / 2 - np.arctan((2 * r - g - b) / denominator))

    h = np.where(g >= b, angle, angle + np.pi)
    # The radicand is non-negative for real input; clamp rounding noise
    s = 2 * np.sqrt(np.maximum((r - g) ** 2 + (r - b) * (g - b), 0.0)) / _SQRT6
    i = (r + g + b) / _SQRT3

    return np.stack([h, s, i], axis=-1)


def calculate_color_moments(hsi: np.ndarray) -> np.ndarray:
    """
    Calculate the first three moments of each HSI channel.

    Parameters
    ----------
    hsi : np.ndarray
        Array of shape (..., 3) with per-pixel h, s, i values.

    Returns
    -------
    np.ndarray
        9-element vector ``[mean, std, skew]`` for h, then s, then i, where
        ``std = sqrt(mean((v - mean)^2))`` and
        ``skew = cbrt(mean((v - mean)^3))`` (sign preserved).
    """
    values = np.asarray(hsi, dtype=np.float64).reshape(-1, 3)
    if values.shape[0] == 0:
        raise ValueError("Cannot compute moments of an empty pixel set")

    mean = values.mean(axis=0)

    # Central moments about the mean; scipy warns on constant channels,
    # where the exact answer is 0
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        second = stats.moment(values, 2, axis=0)
        third = stats.moment(values, 3, axis=0)

    std = np.sqrt(second)
    skew = np.cbrt(third)

    return np.stack([mean, std, skew], axis=-1).reshape(-1)


@timer
def extract_color_features(image: Any) -> np.ndarray:
    """
    Extract the HSI color-moment vector of an image.

    Parameters
    ----------
    image : RGBImage, np.ndarray or image-like
        Decoded image, see `leaf_features.core.image.as_image`.

    Returns
    -------
    np.ndarray
        float64 array of length 9 ordered as `COLOR_FEATURE_NAMES`.

    Raises
    ------
    InvalidInputError
        If the image has zero width or height.
    """
    image = require_nonempty(as_image(image))

    logger.debug(f"Extracting color moments from {image.width}x{image.height} image")

    rgb = image.pixels.reshape(-1, 3)
    hsi = rgb_to_hsi(rgb)
    features = calculate_color_moments(hsi)

    logger.debug(f"Color moments: {dict(zip(COLOR_FEATURE_NAMES, features.round(4)))}")
    return features
