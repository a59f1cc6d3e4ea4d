#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Feature extraction modules for decoded RGB images.

This package contains the color-moment extractor, the gray-level
co-occurrence texture extractor, and the pipeline that concatenates them
into a single feature vector.
"""
