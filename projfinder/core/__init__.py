# projfinder/core/__init__.py
