# projfinder/config/loader.py
"""
Handles loading, merging, and saving of configurations from/to TOML files.
"""
import toml
from pathlib import Path
from typing import Any, Dict, List, Optional
import structlog

from projfinder.exceptions import ConfigError

from .settings import (
    DEFAULT_IGNORED_NAMES, DEFAULT_SEARCH_DEPTH, DetectorKind, DirectorySpec, DiscoveryConfig,
)

log = structlog.get_logger(__name__)

PROJECT_CONFIG_FILENAMES = [".projfinder.toml", "projfinder.toml", "pyproject.toml"]
USER_CONFIG_DIR = Path.home() / ".config" / "projfinder"
USER_CONFIG_FILE = USER_CONFIG_DIR / "config.toml"

KNOWN_CONFIG_KEYS = {
    "search_path", "ignored_names", "extra_ignored_names", "ignore_patterns",
    "detectors", "markers", "projects_file",
}

def _load_toml_file_data(file_path: Path) -> Dict[str, Any]:
    if not file_path.is_file():
        return {}
    log.debug("loading_toml_config_file", path=str(file_path))
    try:
        data = toml.load(file_path)
    except (toml.TomlDecodeError, OSError) as e:
        log.error("config_file_load_error", path=str(file_path), error=str(e))
        return {}
    if file_path.name == "pyproject.toml":
        return data.get("tool", {}).get("projfinder", {})
    return data

def load_and_merge_configs(cwd: Optional[Path] = None) -> Dict[str, Any]:
    # merges the user-level config with the first project-local config found in cwd.
    cwd = cwd or Path.cwd()
    merged: Dict[str, Any] = {}
    if USER_CONFIG_FILE.is_file():
        log.info("loading_user_global_config", path=str(USER_CONFIG_FILE))
        merged.update(_load_toml_file_data(USER_CONFIG_FILE))

    for filename in PROJECT_CONFIG_FILENAMES:
        candidate = cwd / filename
        if not candidate.is_file():
            continue
        project_settings = _load_toml_file_data(candidate)
        if not project_settings:
            continue
        log.info("loading_project_local_config", path=str(candidate))
        if "profiles" in project_settings:
            # project profiles win per name; a malformed table is left for build_config to reject.
            project_profiles = project_settings.pop("profiles")
            user_profiles = merged.get("profiles")
            if isinstance(user_profiles, dict) and isinstance(project_profiles, dict):
                project_profiles = {**user_profiles, **project_profiles}
            merged["profiles"] = project_profiles
        merged.update(project_settings)
        break

    if not merged:
        log.debug("no_configuration_files_loaded")
    return merged

def _parse_search_path_entry(entry: Any) -> DirectorySpec:
    if isinstance(entry, str):
        return DirectorySpec(entry, DEFAULT_SEARCH_DEPTH)
    if isinstance(entry, (list, tuple)):
        if len(entry) == 1:
            return DirectorySpec(entry[0], DEFAULT_SEARCH_DEPTH)
        if len(entry) == 2:
            return DirectorySpec(entry[0], entry[1])
        raise ConfigError(f"search_path entry must be [path] or [path, depth], got {entry!r}")
    if isinstance(entry, dict):
        if "path" not in entry:
            raise ConfigError(f"search_path table entry is missing 'path': {entry!r}")
        return DirectorySpec(entry["path"], entry.get("depth", DEFAULT_SEARCH_DEPTH))
    raise ConfigError(f"unsupported search_path entry: {entry!r}")

def parse_search_path(raw: Any) -> List[DirectorySpec]:
    # converts the raw toml value into directory specs; depth values are validated later, per run.
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigError(f"search_path must be a list, got {type(raw).__name__}")
    return [_parse_search_path_entry(entry) for entry in raw]

def _string_list(raw: Any, key: str) -> List[str]:
    if not isinstance(raw, list) or not all(isinstance(item, str) for item in raw):
        raise ConfigError(f"'{key}' must be a list of strings, got {raw!r}")
    return list(raw)

def _apply_settings(config: DiscoveryConfig, settings: Dict[str, Any]):
    unknown = set(settings) - KNOWN_CONFIG_KEYS - {"profiles", "description"}
    if unknown:
        log.warning("unknown_config_keys_ignored", keys=sorted(unknown))

    if "search_path" in settings:
        config.search_path = parse_search_path(settings["search_path"])
    if "ignored_names" in settings:
        config.ignored_names = _string_list(settings["ignored_names"], "ignored_names")
    if "extra_ignored_names" in settings:
        extra = _string_list(settings["extra_ignored_names"], "extra_ignored_names")
        config.ignored_names = config.ignored_names + [n for n in extra if n not in config.ignored_names]
    if "ignore_patterns" in settings:
        config.ignore_patterns = _string_list(settings["ignore_patterns"], "ignore_patterns")
    if "markers" in settings:
        config.markers = _string_list(settings["markers"], "markers")
    if "detectors" in settings:
        kinds = []
        for name in _string_list(settings["detectors"], "detectors"):
            kind = DetectorKind.from_string(name)
            if kind is None:
                raise ConfigError(f"unknown detector '{name}', expected one of {[k.value for k in DetectorKind]}")
            kinds.append(kind)
        config.detectors = kinds
    if "projects_file" in settings:
        value = settings["projects_file"]
        if not isinstance(value, str) or not value:
            raise ConfigError(f"'projects_file' must be a non-empty string, got {value!r}")
        config.projects_file = Path(value).expanduser()

def build_config(raw: Dict[str, Any], profile_name: Optional[str] = None) -> DiscoveryConfig:
    # layers top-level settings and then the named profile onto the defaults.
    config = DiscoveryConfig()
    _apply_settings(config, raw)

    if profile_name:
        profiles = raw.get("profiles", {})
        if not isinstance(profiles, dict):
            raise ConfigError(f"'profiles' must be a table of tables, got {type(profiles).__name__}")
        profile = profiles.get(profile_name)
        if profile is None:
            raise ConfigError(f"profile '{profile_name}' not found in configuration files")
        if not isinstance(profile, dict):
            raise ConfigError(f"profile '{profile_name}' must be a table")
        log.info("applying_profile_settings", profile=profile_name)
        _apply_settings(config, profile)

    log.debug(
        "discovery_config_built",
        search_path_entries=len(config.search_path),
        ignored_names=len(config.ignored_names),
        custom_ignores=sorted(set(config.ignored_names) - DEFAULT_IGNORED_NAMES),
    )
    return config

def save_search_path(specs: List[DirectorySpec], cwd: Optional[Path] = None) -> Path:
    # appends search path entries to the project-local .projfinder.toml, skipping ones already present.
    cwd = cwd or Path.cwd()
    target = cwd / ".projfinder.toml"
    if not target.exists() and (cwd / "projfinder.toml").exists():
        target = cwd / "projfinder.toml"
    log.info("attempting_to_save_search_path", path=str(target), entries=len(specs))

    existing: Dict[str, Any] = {}
    if target.exists():
        try:
            existing = toml.load(target)
        except toml.TomlDecodeError as e:
            raise ConfigError(f"Could not read existing TOML {target} to save search path: {e}")

    current = parse_search_path(existing.get("search_path"))
    # rewritten as tables: toml arrays must hold a single type.
    entries = [{"path": s.path, "depth": s.depth} for s in current]
    existing["search_path"] = entries
    known = {(s.path, s.depth) for s in current}
    for spec in specs:
        key = (str(spec.path), spec.depth)
        if key in known:
            continue
        entries.append({"path": key[0], "depth": key[1]})
        known.add(key)

    try:
        with target.open("w", encoding="utf-8") as f:
            toml.dump(existing, f)
    except OSError as e:
        raise ConfigError(f"Error writing search path to {target}: {e}")
    log.info("search_path_saved", path=str(target))
    return target
