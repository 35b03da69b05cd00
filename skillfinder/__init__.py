from __future__ import annotations

"""
Top-level package for skillfinder, a keyword search over GitHub skill
registries.

The package downloads each registry's README, recovers catalog entries
from list and table markup, falls back to the repository tree when the
README has nothing usable, and ranks everything with a small lexical
fuzzy scorer.  There are no side effects on import; the CLI lives in
:mod:`skillfinder.cli` and the HTTP service in :mod:`skillfinder.api`.
"""

__version__ = "1.0.0"
