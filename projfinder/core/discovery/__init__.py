# projfinder/core/discovery/__init__.py
"""
Directory traversal for projfinder.

This package walks configured directory trees to a bounded depth, skipping
hidden, unreadable and ignored directories, and hands each visited directory
to a root detector.
"""
from .lister import list_child_directories
from .pattern_matching import PathFilter
from .walker import Walker

__all__ = ["PathFilter", "Walker", "list_child_directories"]
