#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Core functionality for leaf feature extraction.

This module contains the core components for image handling, error types,
configuration management, and logging setup.
"""
