#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Leaf Features Extraction Package.

Color-moment and gray-level co-occurrence texture descriptors computed from
decoded RGB images, producing fixed-length vectors for plant-disease
classifiers.
"""

__version__ = "0.1.0"
__author__ = "Elena Project Team"
__email__ = "user@example.com"

from leaf_features.core.exceptions import (
    FeatureExtractionError,
    InvalidInputError,
    DegenerateInputError,
)
from leaf_features.core.image import RGBImage, as_image
from leaf_features.features.color import (
    COLOR_FEATURE_NAMES,
    extract_color_features,
)
from leaf_features.features.texture import (
    TEXTURE_FEATURE_NAMES,
    extract_texture_features,
)
from leaf_features.features.extractor import (
    FEATURE_NAMES,
    FeatureExtractor,
    extract_batch,
    extract_features,
)

__all__ = [
    "FeatureExtractionError",
    "InvalidInputError",
    "DegenerateInputError",
    "RGBImage",
    "as_image",
    "COLOR_FEATURE_NAMES",
    "TEXTURE_FEATURE_NAMES",
    "FEATURE_NAMES",
    "extract_color_features",
    "extract_texture_features",
    "extract_features",
    "extract_batch",
    "FeatureExtractor",
    "__version__",
]
