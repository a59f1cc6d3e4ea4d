#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Metadata utilities for the leaf feature extraction pipeline.

This module documents the fixed layout of the feature vector and summarizes
batches of extracted features, including per-feature statistics and
correlation analysis.
"""
import numpy as np
import pandas as pd
from typing import Dict, List, Optional, Sequence, Tuple

from leaf_features.core.logging_config import get_module_logger
from leaf_features.features.extractor import FEATURE_EXTRACTORS, get_feature_names

# Initialize logger
logger = get_module_logger(__name__)

# Define feature descriptions
FEATURE_DESCRIPTIONS = {
    # Color features
    "mean_h": "Mean hue (radians, coordinate transform HSI)",
    "std_h": "Root of the second central moment of hue",
    "skew_h": "Signed cube root of the third central moment of hue",
    "mean_s": "Mean saturation",
    "std_s": "Root of the second central moment of saturation",
    "skew_s": "Signed cube root of the third central moment of saturation",
    "mean_i": "Mean intensity ((r + g + b) / sqrt(3))",
    "std_i": "Root of the second central moment of intensity",
    "skew_i": "Signed cube root of the third central moment of intensity",

    # Texture features
    "mean_energy": "GLCM energy (sum of squared entries), mean over 4 directions",
    "mean_contrast": "GLCM contrast (squared level difference), mean over 4 directions",
    "mean_entropy": "GLCM entropy (sum of p log2 p), mean over 4 directions",
    "mean_correlation": "GLCM correlation (linear dependency of levels), mean over 4 directions",
    "std_energy": "GLCM energy, standard deviation over 4 directions",
    "std_contrast": "GLCM contrast, standard deviation over 4 directions",
    "std_entropy": "GLCM entropy, standard deviation over 4 directions",
    "std_correlation": "GLCM correlation, standard deviation over 4 directions",
}


def get_feature_category(feature_name: str) -> str:
    """
    Get the feature group ('color' or 'texture') a feature belongs to.

    Parameters
    ----------
    feature_name : str
        Feature name.

    Returns
    -------
    str
        Feature group, or "other" for unknown names.
    """
    for group, (_, names) in FEATURE_EXTRACTORS.items():
        if feature_name in names:
            return group
    return "other"


def get_feature_description(feature_name: str) -> str:
    """
    Get the description of a feature based on its name.
    """
    return FEATURE_DESCRIPTIONS.get(feature_name, "Unknown feature")


def describe_features(feature_groups: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Describe the layout of the feature vector.

    Parameters
    ----------
    feature_groups : sequence of str, optional
        Groups to describe. If None, uses ENABLED_FEATURES from config.

    Returns
    -------
    pd.DataFrame
        Columns ``position``, ``name``, ``group`` and ``description``, one
        row per vector element in output order.
    """
    names = get_feature_names(feature_groups)
    return pd.DataFrame({
        "position": np.arange(len(names)),
        "name": names,
        "group": [get_feature_category(name) for name in names],
        "description": [get_feature_description(name) for name in names],
    })


def compute_feature_statistics(
    features_df: pd.DataFrame
) -> Dict[str, Dict[str, Optional[float]]]:
    """
    Compute statistics for each feature of a batch.

    NaN values mark degenerate texture inputs; they are excluded from the
    statistics and counted under ``missing``.

    Parameters
    ----------
    features_df : pd.DataFrame
        DataFrame with extracted features, as returned by `extract_batch`.

    Returns
    -------
    dict
        Dictionary with feature statistics.
    """
    stats = {}

    for column in features_df.columns:
        values = features_df[column].dropna()
        missing = int(features_df[column].isna().sum())

        if missing:
            logger.warning(f"Feature '{column}' has {missing} NaN values")

        if len(values) > 0:
            stats[column] = {
                "min": float(values.min()),
                "max": float(values.max()),
                "mean": float(values.mean()),
                "median": float(values.median()),
                "std": float(values.std(ddof=0)),
                "count": int(len(values)),
                "missing": missing,
            }
        else:
            stats[column] = {
                "min": None,
                "max": None,
                "mean": None,
                "median": None,
                "std": None,
                "count": 0,
                "missing": missing,
            }

    return stats


def compute_feature_correlations(
    features_df: pd.DataFrame,
    method: str = 'pearson',
    min_corr: float = 0.7
) -> Dict[str, List[Tuple[str, float]]]:
    """
    Find strongly correlated feature pairs in a batch.

    Parameters
    ----------
    features_df : pd.DataFrame
        DataFrame with extracted features.
    method : str, optional
        Correlation method, by default 'pearson'.
    min_corr : float, optional
        Minimum absolute correlation to include, by default 0.7.

    Returns
    -------
    dict
        Maps each feature to ``(other feature, correlation)`` pairs sorted by
        decreasing absolute correlation.
    """
    corr_matrix = features_df.corr(method=method)

    correlations = {}
    for column in corr_matrix.columns:
        corr_values = corr_matrix[column].abs()
        high_corr = corr_values[corr_values >= min_corr].drop(column, errors="ignore")
        high_corr = high_corr.sort_values(ascending=False)

        if len(high_corr) > 0:
            correlations[column] = [
                (feature, float(corr_matrix[column][feature]))
                for feature in high_corr.index
            ]

    return correlations
