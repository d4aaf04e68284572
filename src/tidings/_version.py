"""
Provides tidings version information.
"""

# This file is auto-generated! Do not edit!
# Use `python -m incremental.update tidings` to change this file.

from incremental import Version


__version__ = Version("tidings", 21, 8, 0)
__all__ = ["__version__"]
