"""Shared constants for pagination."""

from __future__ import annotations

import os

EPSILON = 1e-4
DEBUG_PAGINATION = os.getenv("DEBUG_PAGINATION", "0") not in {
    "",
    "0",
    "false",
    "False",
}
