"""Global configuration data structures and loading.

Provides immutable user preferences loaded from ~/.stashtriage/config.toml.
A missing file is not an error: every setting has a default.
"""

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

import tomlkit

DEFAULT_BRANCH_PREFIX = "stash/"
DEFAULT_PLACEHOLDER_BRANCH = "stash/__TEMP_STASH__"
DEFAULT_APPLIED_CHECK = "stash-applied"

CONFIG_ENV_VAR = "STASHTRIAGE_CONFIG"


@dataclass(frozen=True)
class TriageConfig:
    """Immutable triage preferences.

    Loaded once at CLI entry point and stored in StashTriageContext.
    All fields are read-only after construction.
    """

    branch_prefix: str = DEFAULT_BRANCH_PREFIX
    placeholder_branch: str = DEFAULT_PLACEHOLDER_BRANCH
    applied_check: str = DEFAULT_APPLIED_CHECK
    show_diff: bool = True


STRING_FIELDS = ("branch_prefix", "placeholder_branch", "applied_check")
BOOLEAN_FIELDS = ("show_diff",)
CONFIG_FIELDS = STRING_FIELDS + BOOLEAN_FIELDS


def global_config_path() -> Path:
    """Get the path to the global config file.

    Honors STASHTRIAGE_CONFIG so tests and unusual setups can relocate it.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".stashtriage" / "config.toml"


def load_global_config(path: Path | None = None) -> TriageConfig:
    """Load config from ~/.stashtriage/config.toml, falling back to defaults.

    Args:
        path: Config file path (defaults to global_config_path())

    Returns:
        TriageConfig with file values layered over defaults

    Raises:
        ValueError: If a known key has the wrong type or a string value is empty
    """
    config_path = path if path is not None else global_config_path()

    if not config_path.exists():
        return TriageConfig()

    data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    config = TriageConfig()

    for field_name in STRING_FIELDS:
        if field_name not in data:
            continue
        value = data[field_name]
        if not isinstance(value, str) or not value:
            raise ValueError(f"'{field_name}' in {config_path} must be a non-empty string")
        config = replace(config, **{field_name: value})

    for field_name in BOOLEAN_FIELDS:
        if field_name not in data:
            continue
        value = data[field_name]
        if not isinstance(value, bool):
            raise ValueError(f"'{field_name}' in {config_path} must be true or false")
        config = replace(config, **{field_name: value})

    return config


def save_global_config(config: TriageConfig, path: Path | None = None) -> None:
    """Save config to ~/.stashtriage/config.toml, preserving formatting.

    Creates the config directory if it doesn't exist. Uses tomlkit so that
    comments and unrelated keys in an existing file survive the rewrite.
    """
    config_path = path if path is not None else global_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    if config_path.exists():
        doc = tomlkit.parse(config_path.read_text(encoding="utf-8"))
    else:
        doc = tomlkit.document()
        doc.add(tomlkit.comment("stashtriage configuration"))

    for field_name in CONFIG_FIELDS:
        doc[field_name] = getattr(config, field_name)

    config_path.write_text(tomlkit.dumps(doc), encoding="utf-8")
