"""Utility functions for the cardiovascular risk calculator.

Plotting helpers live in ``utils.visualization`` and are imported from there
directly, since they depend on ``models`` which itself logs through this
package.
"""

from __future__ import annotations

from utils.logging_config import get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
]
