"""
Version information for zkflow.

- __version__: semantic version (PEP 440 core); can be overridden at build
  time with the env var ZKFLOW_VERSION.
- runtime_banner(): short human-readable banner for logs and ``--version``.
"""

from __future__ import annotations

import os
import platform

__version__ = os.getenv("ZKFLOW_VERSION", "0.1.0")


def runtime_banner() -> str:
    return f"zkflow {__version__} (python {platform.python_version()})"


__all__ = ["__version__", "runtime_banner"]
