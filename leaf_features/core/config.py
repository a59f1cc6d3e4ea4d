#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration settings for the leaf feature extraction pipeline.

This module centralizes all configuration parameters used across the feature
extraction modules, making it easier to modify settings in one place.
Values can be overridden at runtime from a YAML file with `load_config`.
"""
from typing import Dict, List, Union, Any
import os
from pathlib import Path
import yaml

# General configuration
N_JOBS: int = -1         # Number of parallel jobs (-1 = all cores)

# Path configuration
DEFAULT_OUTPUT_DIR: Path = Path(os.environ.get("LEAF_FEATURES_OUTPUT_DIR", Path.cwd() / "output"))

# Feature extraction configuration
ENABLED_FEATURES: List[str] = ["color", "texture"]

# Image input configuration
IMAGE_CONFIG: Dict[str, Any] = {
    "channel_order": "rgb",  # Channel order of raw arrays: "rgb", or "bgr" for OpenCV arrays
}

# Texture (GLCM) configuration
TEXTURE_CONFIG: Dict[str, Any] = {
    "gray_levels": 8,
    "level_width": 32,                  # Luma units per gray level
    "luma_weights": (0.30, 0.59, 0.11),  # r, g, b
    "entropy_epsilon": 1e-5,
    "diagonal_weight": 2,               # Increment for pairs with equal levels
    # (name, dx, dy) offsets from the center pixel
    "directions": (
        ("0", 0, 1),
        ("45", -1, 1),
        ("90", 0, -1),
        ("135", -1, -1),
    ),
    "degenerate_policy": "nan",  # Options: 'nan', 'zero', 'raise'
}

# Performance tuning
PERFORMANCE_CONFIG: Dict[str, Any] = {
    "use_parallel": True,
    "prefer": "processes",  # joblib backend preference: 'processes' or 'threads'
    "progress": False,      # Show a progress bar on batch extraction
}

# Logging configuration
LOGGING_CONFIG: Dict[str, Any] = {
    "level": "INFO",  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    "log_to_file": False,
    "log_file": DEFAULT_OUTPUT_DIR / "extraction.log",
    "log_format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

_SECTIONS: Dict[str, Dict[str, Any]] = {
    "image": IMAGE_CONFIG,
    "texture": TEXTURE_CONFIG,
    "performance": PERFORMANCE_CONFIG,
    "logging": LOGGING_CONFIG,
}


def load_config(path: Union[str, Path]) -> Dict[str, Dict[str, Any]]:
    """
    Load configuration overrides from a YAML file.

    The file maps section names (``image``, ``texture``, ``performance``,
    ``logging``) to dictionaries of settings. Values are merged into the
    module-level configuration dictionaries in place, so every module that
    imported them sees the new settings. A ``logging`` section also rebuilds
    the package logger's level and handlers.

    Parameters
    ----------
    path : str or Path
        Path to the YAML file.

    Returns
    -------
    dict
        The merged configuration sections that were present in the file.
    """
    with open(path, "r") as f:
        overrides = yaml.safe_load(f) or {}

    if not isinstance(overrides, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")

    unknown = set(overrides) - set(_SECTIONS)
    if unknown:
        raise ValueError(f"Unknown configuration sections: {sorted(unknown)}")

    merged = {}
    for section, values in overrides.items():
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ValueError(f"Configuration section '{section}' must be a mapping")

        target = _SECTIONS[section]
        for key, value in values.items():
            # YAML has no tuples; keep the shape of the defaults
            if isinstance(target.get(key), tuple) and isinstance(value, list):
                value = tuple(tuple(v) if isinstance(v, list) else v for v in value)
            target[key] = value
        merged[section] = target

    if "logging" in merged:
        # Imported here: logging_config reads this module on import
        from leaf_features.core.logging_config import apply_logging_config
        apply_logging_config()

    return merged
