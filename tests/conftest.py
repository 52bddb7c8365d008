"""Pytest configuration.

Tests import the application through the `src.*` namespace. Putting the repository root on
`sys.path` lets `pytest` run from a plain checkout, without `pip install -e .`.
"""

from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))
