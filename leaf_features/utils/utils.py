#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility functions for the leaf feature extraction pipeline.

This module provides common utility functions used across the feature extraction
modules: call timing and parallel processing over batches of images.
"""
import time
import functools
from typing import Callable, Any, List, Optional, Iterable
from tqdm import tqdm
from joblib import Parallel, delayed

from leaf_features.core.config import PERFORMANCE_CONFIG, N_JOBS
from leaf_features.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)


def timer(func: Callable) -> Callable:
    """
    Decorator to time function execution.

    Parameters
    ----------
    func : Callable
        Function to time.

    Returns
    -------
    Callable
        Wrapped function with timing.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = time.perf_counter() - start_time
        logger.debug(f"Function {func.__name__} took {elapsed:.4f} seconds to run")
        return result
    return wrapper


def parallel_apply(
    func: Callable,
    iterable: Iterable[Any],
    n_jobs: Optional[int] = None,
    prefer: Optional[str] = None,
    progress: Optional[bool] = None,
    **kwargs
) -> List[Any]:
    """
    Apply a function to an iterable in parallel.

    Parameters
    ----------
    func : Callable
        Function to apply.
    iterable : Iterable[Any]
        Items to process.
    n_jobs : int, optional
        Number of jobs. If None, uses N_JOBS from config.
    prefer : str, optional
        'processes' or 'threads'. If None, uses PERFORMANCE_CONFIG.
    progress : bool, optional
        Whether to show a progress bar. If None, uses PERFORMANCE_CONFIG.
    **kwargs
        Additional arguments to pass to the function.

    Returns
    -------
    List[Any]
        Results of applying the function to each item, in input order.
    """
    items = list(iterable)

    if n_jobs is None:
        n_jobs = N_JOBS
    if prefer is None:
        prefer = PERFORMANCE_CONFIG.get("prefer", "processes")
    if progress is None:
        progress = PERFORMANCE_CONFIG.get("progress", False)

    name = getattr(func, "__name__", type(func).__name__)

    # Check if parallelism is enabled
    if not PERFORMANCE_CONFIG.get("use_parallel", True) or n_jobs == 1 or len(items) <= 1:
        logger.debug(f"Running {len(items)} tasks sequentially")
        iterator = tqdm(items, desc=f"Running {name}") if progress else items
        return [func(item, **kwargs) for item in iterator]

    # Use joblib for easier parallelism
    logger.info(f"Running {len(items)} tasks in parallel with {n_jobs} jobs")
    results = Parallel(n_jobs=n_jobs, prefer=prefer, verbose=10 if progress else 0)(
        delayed(func)(item, **kwargs) for item in items
    )

    return list(results)
