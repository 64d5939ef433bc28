# projfinder/__init__.py
"""projfinder: discover project roots under configured directory trees."""

__version__ = "0.1.0"
