#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Unified feature extraction pipeline.

Combines the color-moment and GLCM texture extractors into the 17-element
feature vector fed to the classifier, and runs them over batches of images.

Example:
    >>> extractor = FeatureExtractor()
    >>> vector = extractor(pixels)          # (17,) float64
    >>> table = extractor.extract_batch([pixels_a, pixels_b])
"""
from collections import OrderedDict
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from leaf_features.core.config import ENABLED_FEATURES, TEXTURE_CONFIG
from leaf_features.core.image import as_image, require_nonempty
from leaf_features.core.logging_config import get_module_logger
from leaf_features.features.color import COLOR_FEATURE_NAMES, extract_color_features
from leaf_features.features.texture import TEXTURE_FEATURE_NAMES, extract_texture_features
from leaf_features.utils.utils import parallel_apply, timer

# Initialize logger
logger = get_module_logger(__name__)


def _texture(image: Any, degenerate_policy: Optional[str] = None) -> np.ndarray:
    return extract_texture_features(image, degenerate_policy=degenerate_policy)


def _color(image: Any, degenerate_policy: Optional[str] = None) -> np.ndarray:
    # Color moments have no degenerate cases
    return extract_color_features(image)


# Group name -> (extractor, feature names), in output order
FEATURE_EXTRACTORS: "OrderedDict[str, Tuple[Callable[..., np.ndarray], List[str]]]" = OrderedDict([
    ("color", (_color, COLOR_FEATURE_NAMES)),
    ("texture", (_texture, TEXTURE_FEATURE_NAMES)),
])

FEATURE_NAMES: List[str] = COLOR_FEATURE_NAMES + TEXTURE_FEATURE_NAMES


def _resolve_groups(feature_groups: Optional[Sequence[str]] = None) -> List[str]:
    if feature_groups is None:
        feature_groups = ENABLED_FEATURES
    if isinstance(feature_groups, str):
        feature_groups = feature_groups.split(",")

    requested = [group.strip() for group in feature_groups]
    if "all" in requested:
        return list(FEATURE_EXTRACTORS)

    unknown = [group for group in requested if group not in FEATURE_EXTRACTORS]
    if unknown:
        raise ValueError(
            f"Unknown feature groups: {unknown}. Available: {list(FEATURE_EXTRACTORS)}"
        )
    if not requested:
        raise ValueError("At least one feature group must be enabled")

    # Registry order keeps the vector layout fixed
    return [group for group in FEATURE_EXTRACTORS if group in requested]


def get_feature_names(feature_groups: Optional[Sequence[str]] = None) -> List[str]:
    """
    Return the ordered feature names produced for the given groups.
    """
    names = []
    for group in _resolve_groups(feature_groups):
        names.extend(FEATURE_EXTRACTORS[group][1])
    return names


def extract_features(
    image: Any,
    feature_groups: Optional[Sequence[str]] = None,
    degenerate_policy: Optional[str] = None
) -> np.ndarray:
    """
    Extract the concatenated feature vector of one image.

    Parameters
    ----------
    image : RGBImage, np.ndarray or image-like
        Decoded image.
    feature_groups : sequence of str, optional
        Groups to extract ('color', 'texture' or 'all'). If None, uses
        ENABLED_FEATURES from config.
    degenerate_policy : str, optional
        Texture degenerate policy, see `extract_texture_features`.

    Returns
    -------
    np.ndarray
        float64 vector ordered as `get_feature_names(feature_groups)`.
    """
    groups = _resolve_groups(feature_groups)
    image = require_nonempty(as_image(image))

    parts = []
    for group in groups:
        extractor, _ = FEATURE_EXTRACTORS[group]
        parts.append(extractor(image, degenerate_policy=degenerate_policy))

    return np.concatenate(parts)


@timer
def extract_batch(
    images: Iterable[Any],
    feature_groups: Optional[Sequence[str]] = None,
    degenerate_policy: Optional[str] = None,
    n_jobs: Optional[int] = None,
    progress: Optional[bool] = None,
    index: Optional[Sequence[Any]] = None
) -> pd.DataFrame:
    """
    Extract feature vectors for a batch of images.

    Images are independent, so the work is spread over joblib workers.

    Parameters
    ----------
    images : iterable
        Decoded images.
    feature_groups : sequence of str, optional
        Groups to extract. If None, uses ENABLED_FEATURES from config.
    degenerate_policy : str, optional
        Texture degenerate policy.
    n_jobs : int, optional
        Number of parallel jobs. If None, uses N_JOBS from config.
    progress : bool, optional
        Whether to show progress. If None, uses PERFORMANCE_CONFIG.
    index : sequence, optional
        Row labels (e.g. image identifiers), by default 0..n-1.

    Returns
    -------
    pd.DataFrame
        One row per image, one column per feature.
    """
    groups = _resolve_groups(feature_groups)
    columns = get_feature_names(groups)
    # Coerce up front so worker processes receive plain RGB grids
    images = [as_image(image) for image in images]
    if degenerate_policy is None:
        degenerate_policy = TEXTURE_CONFIG.get("degenerate_policy", "nan")

    if index is not None and len(index) != len(images):
        raise ValueError(f"Got {len(index)} index labels for {len(images)} images")

    logger.info(f"Extracting {len(columns)} features from {len(images)} images")

    vectors = parallel_apply(
        extract_features,
        images,
        n_jobs=n_jobs,
        progress=progress,
        feature_groups=groups,
        degenerate_policy=degenerate_policy,
    )

    data = np.vstack(vectors) if vectors else np.empty((0, len(columns)))
    df = pd.DataFrame(data, columns=columns, index=index)

    nan_rows = int(df.isna().any(axis=1).sum())
    if nan_rows:
        logger.warning(f"{nan_rows} of {len(df)} images produced NaN features (degenerate texture)")

    return df


class FeatureExtractor:
    """
    Callable feature extraction pipeline with a fixed configuration.

    Parameters
    ----------
    feature_groups : sequence of str, optional
        Groups to extract. If None, uses ENABLED_FEATURES from config.
    degenerate_policy : str, optional
        Texture degenerate policy.
    n_jobs : int, optional
        Number of parallel jobs for batches.
    """

    def __init__(self,
                 feature_groups: Optional[Sequence[str]] = None,
                 degenerate_policy: Optional[str] = None,
                 n_jobs: Optional[int] = None):
        self.feature_groups = _resolve_groups(feature_groups)
        self.degenerate_policy = degenerate_policy
        self.n_jobs = n_jobs

    @property
    def feature_names(self) -> List[str]:
        return get_feature_names(self.feature_groups)

    def __call__(self, image: Any) -> np.ndarray:
        return extract_features(image, self.feature_groups, self.degenerate_policy)

    def extract_named(self, image: Any) -> Dict[str, float]:
        """Extract one image as a ``{feature name: value}`` dictionary."""
        return dict(zip(self.feature_names, (float(v) for v in self(image))))

    def extract_batch(self, images: Iterable[Any],
                      index: Optional[Sequence[Any]] = None,
                      progress: Optional[bool] = None) -> pd.DataFrame:
        return extract_batch(
            images,
            feature_groups=self.feature_groups,
            degenerate_policy=self.degenerate_policy,
            n_jobs=self.n_jobs,
            progress=progress,
            index=index,
        )

    def __repr__(self) -> str:
        return (f"FeatureExtractor(feature_groups={self.feature_groups}, "
                f"degenerate_policy={self.degenerate_policy!r})")
