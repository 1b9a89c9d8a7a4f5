"""Version file - managed by setuptools-scm.

This file serves as a placeholder for development and is overwritten during builds.

- During package build (pip install, python -m build), setuptools-scm reads Git tags
  and overwrites this file with the actual version
- The hardcoded values below are fallbacks when running from a plain source tree
"""

from typing import Tuple

# Placeholder values - overwritten by setuptools-scm during package build
# Matches fallback_version in pyproject.toml
__version__ = "0.1.0"
__version_tuple__: Tuple[int, int, int] = (0, 1, 0)
