#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Decoded image handling for the leaf feature extraction pipeline.

The extractors work on a read-only RGB pixel grid. This module wraps numpy
arrays (and duck-typed image objects exposing ``width``, ``height`` and
``pixel_at``) into that grid. Decoding image files is left to the caller.
"""
from typing import Any, Optional, Tuple

import numpy as np
from skimage.util import img_as_ubyte

from leaf_features.core.config import IMAGE_CONFIG
from leaf_features.core.exceptions import InvalidInputError
from leaf_features.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)


class RGBImage:
    """
    Immutable view over an 8-bit RGB pixel grid.

    Parameters
    ----------
    pixels : np.ndarray
        Array of shape (height, width, 3) with dtype uint8, indexed
        ``[y, x, channel]`` with channels in r, g, b order.
    """

    def __init__(self, pixels: np.ndarray):
        pixels = np.asarray(pixels)
        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise InvalidInputError(
                f"Expected an array of shape (height, width, 3), got {pixels.shape}"
            )
        if pixels.dtype != np.uint8:
            raise InvalidInputError(f"Expected uint8 pixels, got {pixels.dtype}")

        # Own a private copy so callers can't mutate the grid mid-extraction
        self._pixels = pixels.copy()
        self._pixels.flags.writeable = False

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def size(self) -> int:
        """Number of pixels."""
        return self.width * self.height

    @property
    def pixels(self) -> np.ndarray:
        """Read-only (height, width, 3) uint8 array."""
        return self._pixels

    def pixel_at(self, x: int, y: int) -> Tuple[int, int, int]:
        """Return the (r, g, b) triple at column x, row y."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} image")
        r, g, b = self._pixels[y, x]
        return int(r), int(g), int(b)

    def __repr__(self) -> str:
        return f"RGBImage(width={self.width}, height={self.height})"


def _dimension(obj: Any, name: str) -> int:
    value = getattr(obj, name)
    if callable(value):
        value = value()
    return int(value)


def _from_array(array: np.ndarray, channel_order: str) -> RGBImage:
    if array.ndim == 2:
        array = np.stack([array] * 3, axis=-1)
    elif array.ndim == 3 and array.shape[2] == 4:
        # Drop alpha
        array = array[..., :3]

    if array.ndim == 3 and array.shape[2] == 3 and channel_order == "bgr":
        array = array[..., ::-1]

    if array.ndim != 3 or array.shape[2] != 3:
        raise InvalidInputError(
            f"Expected an array of shape (height, width, 3), got {array.shape}"
        )

    if array.dtype != np.uint8:
        if array.dtype == bool or not np.issubdtype(array.dtype, np.number):
            raise InvalidInputError(f"Unsupported pixel dtype: {array.dtype}")
        is_integer = np.issubdtype(array.dtype, np.integer)
        if array.size == 0 or (is_integer and array.min() >= 0 and array.max() <= 255):
            # 8-bit values stored in a wider integer type
            array = array.astype(np.uint8)
        elif np.issubdtype(array.dtype, np.signedinteger):
            # Plain Python ints land here; there is no bit depth to rescale from
            raise InvalidInputError(
                f"Integer pixel values must lie in [0, 255], "
                f"got [{array.min()}, {array.max()}]"
            )
        else:
            try:
                array = img_as_ubyte(array)
            except ValueError as e:
                raise InvalidInputError(f"Cannot convert pixels to 8-bit: {e}") from e

    return RGBImage(array)


def _from_pixel_source(obj: Any) -> RGBImage:
    width = _dimension(obj, "width")
    height = _dimension(obj, "height")
    pixel_at = getattr(obj, "pixel_at", None) or getattr(obj, "pixelAt")

    logger.debug(f"Materializing {width}x{height} image from {type(obj).__name__}")
    pixels = np.zeros((max(height, 0), max(width, 0), 3), dtype=np.uint8)
    for y in range(height):
        for x in range(width):
            r, g, b = pixel_at(x, y)
            pixels[y, x] = (r, g, b)

    return RGBImage(pixels)


def as_image(obj: Any, channel_order: Optional[str] = None) -> RGBImage:
    """
    Coerce an image-like object into an `RGBImage`.

    Parameters
    ----------
    obj : RGBImage, np.ndarray or image-like
        - `RGBImage`: returned unchanged.
        - numpy array: (H, W, 3) uint8 is used directly; (H, W, 4) drops the
          alpha channel; (H, W) grayscale is replicated to three channels;
          integer arrays holding values in [0, 255] are cast directly;
          float arrays in [0, 1] and wider unsigned integer data are
          rescaled to 8-bit with scikit-image. Signed integers outside
          [0, 255] are rejected. Nested lists are treated as arrays.
        - any object exposing ``width``, ``height`` (attributes or
          zero-argument methods) and ``pixel_at(x, y)`` or ``pixelAt(x, y)``.
    channel_order : str, optional
        Channel order of raw arrays, "rgb" or "bgr" (OpenCV). If None, uses
        IMAGE_CONFIG. Ignored for `RGBImage` and pixel-source objects.

    Returns
    -------
    RGBImage
        Read-only image.
    """
    if isinstance(obj, RGBImage):
        return obj

    if channel_order is None:
        channel_order = IMAGE_CONFIG.get("channel_order", "rgb")
    if channel_order not in ("rgb", "bgr"):
        raise ValueError(f"Unknown channel order: {channel_order}")

    if isinstance(obj, (list, tuple)):
        obj = np.asarray(obj)

    if isinstance(obj, np.ndarray):
        return _from_array(obj, channel_order)

    if hasattr(obj, "width") and hasattr(obj, "height") and (
        hasattr(obj, "pixel_at") or hasattr(obj, "pixelAt")
    ):
        return _from_pixel_source(obj)

    raise InvalidInputError(f"Cannot interpret {type(obj).__name__} as an image")


def require_nonempty(image: RGBImage) -> RGBImage:
    """
    Raise `InvalidInputError` when the image has zero width or height.
    """
    if image.width == 0 or image.height == 0:
        raise InvalidInputError(
            f"Image must have at least one pixel, got {image.width}x{image.height}"
        )
    return image
