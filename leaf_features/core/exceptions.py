#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exception types raised by the feature extractors.
"""
from typing import Optional


class FeatureExtractionError(ValueError):
    """Base class for errors raised while extracting features."""


class InvalidInputError(FeatureExtractionError):
    """The input is not a usable image (zero area, bad shape or channel count)."""


class DegenerateInputError(FeatureExtractionError):
    """
    A texture statistic is undefined for the input.

    Raised under the ``"raise"`` degenerate policy when a co-occurrence
    matrix has no counted pairs or a correlation denominator is zero.
    """

    def __init__(self, message: str,
                 direction: Optional[str] = None,
                 statistic: Optional[str] = None):
        super().__init__(message)
        self.direction = direction
        self.statistic = statistic
