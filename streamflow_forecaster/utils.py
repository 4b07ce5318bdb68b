"""
Utility functions shared by model fitting and evaluation.

Contains the ordered thread-pool helper used for independent fits and the
warning filter applied around statsmodels optimisers.
"""

import warnings
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager

from statsmodels.tools.sm_exceptions import ConvergenceWarning, InterpolationWarning, ValueWarning


def run_in_order(func, items, max_workers=1):
    """
    Apply ``func`` to every item, possibly concurrently.

    Results are returned in the order of ``items`` regardless of completion
    order. ``func`` is expected to handle its own exceptions.
    """
    items = list(items)
    if max_workers <= 1 or len(items) <= 1:
        return [func(item) for item in items]
    with ThreadPoolExecutor(max_workers=min(max_workers, len(items))) as executor:
        return list(executor.map(func, items))


@contextmanager
def quiet_statsmodels():
    """Silence optimiser chatter from statsmodels while fitting."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ConvergenceWarning)
        warnings.simplefilter("ignore", InterpolationWarning)
        warnings.simplefilter("ignore", ValueWarning)
        warnings.simplefilter("ignore", RuntimeWarning)
        warnings.filterwarnings("ignore", message=".*[Nn]on-stationary starting.*")
        warnings.filterwarnings("ignore", message=".*[Nn]on-invertible starting.*")
        yield
