# projfinder/config/__init__.py
from .settings import (
    DEFAULT_IGNORED_NAMES,
    DEFAULT_PROJECTS_FILE,
    DEFAULT_SEARCH_DEPTH,
    DetectorKind,
    DirectorySpec,
    DiscoveryConfig,
)
from .loader import build_config, load_and_merge_configs, save_search_path

__all__ = [
    "DEFAULT_IGNORED_NAMES",
    "DEFAULT_PROJECTS_FILE",
    "DEFAULT_SEARCH_DEPTH",
    "DetectorKind",
    "DirectorySpec",
    "DiscoveryConfig",
    "build_config",
    "load_and_merge_configs",
    "save_search_path",
]
