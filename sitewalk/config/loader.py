# sitewalk/config/loader.py
"""
Handles loading, merging, and saving of configurations from/to TOML files.
"""
import toml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import asdict, fields as dataclass_fields, MISSING
from enum import Enum

from sitewalk.exceptions import ConfigError
from sitewalk.logging_setup import get_logger

from .settings import ListConfig

log = get_logger(__name__)

PROJECT_CONFIG_FILENAMES = [".sitewalk.toml", "sitewalk.toml", "pyproject.toml"]
USER_CONFIG_DIR = Path.home() / ".config" / "sitewalk"
USER_CONFIG_FILE = USER_CONFIG_DIR / "config.toml"

CONFIG_KEY_TO_LISTCONFIG_ATTR_MAP: Dict[str, str] = {
    "root": "root_path",
    "exclude_dirs": "exclude_dirs",
    "include_folders": "include_folders",
    "include_files": "include_files",
    "with_types": "attach_metadata",
    "log_dirs": "log_visited_directories",
    "on_error": "error_policy",
    "mode": "execution_mode",
    "max_concurrency": "max_concurrency",
    "extensions": "extensions",
    "exclude_globs": "exclude_globs",
    "skip_node_modules": "skip_node_modules",
    "output_format": "output_format",
    "output_file": "output_file",
    "console_show_summary": "console_show_summary",
}

ALWAYS_SAVE_ATTRS = ("exclude_dirs", "extensions", "exclude_globs")


def _load_toml_file_data(file_path: Path) -> Dict[str, Any]:
    if not file_path.is_file(): return {}
    log.debug("loading_toml_config_file", path=str(file_path))
    try:
        data = toml.load(file_path)
    except (toml.TomlDecodeError, OSError) as e:
        log.error("config_file_load_error", path=str(file_path), error=str(e))
        return {}
    return data.get("tool", {}).get("sitewalk", {}) if file_path.name == "pyproject.toml" else data


def load_and_merge_configs(project_dir: Optional[Path] = None) -> Dict[str, Any]:
    # user config first, then the first project config found in `project_dir` (cwd by default).
    project_dir = project_dir or Path.cwd()
    merged_toml_data: Dict[str, Any] = {}
    if USER_CONFIG_FILE.is_file():
        log.info("loading_user_global_config", path=str(USER_CONFIG_FILE))
        merged_toml_data.update(_load_toml_file_data(USER_CONFIG_FILE))

    for filename in PROJECT_CONFIG_FILENAMES:
        candidate = project_dir / filename
        if not candidate.is_file():
            continue
        project_settings = _load_toml_file_data(candidate)
        if not project_settings:
            continue
        log.info("loading_project_local_config", path=str(candidate))
        user_profiles = merged_toml_data.get("profiles")
        project_profiles = project_settings.pop("profiles", None)
        if isinstance(user_profiles, dict) and isinstance(project_profiles, dict):
            user_profiles.update(project_profiles)
        elif isinstance(project_profiles, dict):
            merged_toml_data["profiles"] = project_profiles
        merged_toml_data.update(project_settings)
        log.debug("project_config_applied", source_file=str(candidate))
        break
    if not merged_toml_data: log.debug("no_configuration_files_loaded")
    return merged_toml_data


def config_values_for_profile(raw_configs: Dict[str, Any], profile_name: Optional[str]) -> Dict[str, Any]:
    # top-level settings overlaid with the named profile, keyed by ListConfig attribute.
    values: Dict[str, Any] = {}
    for toml_k, attr in CONFIG_KEY_TO_LISTCONFIG_ATTR_MAP.items():
        if toml_k in raw_configs:
            values[attr] = raw_configs[toml_k]
    if profile_name:
        profile_values = raw_configs.get("profiles", {}).get(profile_name, {})
        if profile_values:
            log.info("applying_profile_settings", profile=profile_name)
            for toml_k, attr in CONFIG_KEY_TO_LISTCONFIG_ATTR_MAP.items():
                if toml_k in profile_values:
                    values[attr] = profile_values[toml_k]
        else:
            log.warning("profile_not_found_in_config_files", profile_name=profile_name)
    return values


def save_config_to_profile(config_to_save: ListConfig, profile_name: str, project_dir: Optional[Path] = None) -> bool:
    project_dir = project_dir or Path.cwd()
    target_toml_path = project_dir / ".sitewalk.toml"
    if not target_toml_path.exists():
        alt_path = project_dir / "sitewalk.toml"
        if alt_path.exists(): target_toml_path = alt_path
    log.info("attempting_to_save_profile", profile=profile_name, path=str(target_toml_path))

    attrs_to_skip = {"save_profile_name"}
    profile_data: Dict[str, Any] = {}
    config_dict = asdict(config_to_save)

    for lc_attr, value in config_dict.items():
        if lc_attr in attrs_to_skip: continue
        toml_key = next((k for k, v in CONFIG_KEY_TO_LISTCONFIG_ATTR_MAP.items() if v == lc_attr), None)
        if not toml_key: continue

        field_def = next((f for f in dataclass_fields(ListConfig) if f.name == lc_attr), None)
        if field_def:
            default_val = field_def.default_factory() if field_def.default_factory is not MISSING else field_def.default
            if value == default_val and not (lc_attr in ALWAYS_SAVE_ATTRS and value):
                continue

        if isinstance(value, Path): profile_data[toml_key] = value.as_posix()
        elif isinstance(value, Enum): profile_data[toml_key] = value.value
        elif value is not None: profile_data[toml_key] = value

    if not profile_data:
        log.info("no_options_to_save_for_profile", profile=profile_name)
        return False

    existing_data: Dict[str, Any] = {}
    if target_toml_path.exists():
        try: existing_data = toml.load(target_toml_path)
        except toml.TomlDecodeError as e:
            raise ConfigError(f"Could not read existing TOML {target_toml_path} to save profile: {e}")

    if profile_name.upper() == "DEFAULT":
        profiles_bak = existing_data.pop("profiles", None)
        existing_data.update(profile_data)
        if profiles_bak is not None: existing_data["profiles"] = profiles_bak
    else:
        existing_data.setdefault("profiles", {})[profile_name] = profile_data

    try:
        with target_toml_path.open("w", encoding="utf-8") as f: toml.dump(existing_data, f)
    except OSError as e:
        raise ConfigError(f"Error writing profile '{profile_name}' to {target_toml_path}: {e}")
    log.info("profile_saved_successfully", profile=profile_name, path=str(target_toml_path))
    return True
