#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility modules for leaf feature extraction.

This package contains utility modules for feature metadata and
general-purpose helpers such as timing and parallel batch processing.
"""
