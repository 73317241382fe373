"""
Configuration — loads settings from .format_applier.yaml, environment
variables, and built-in defaults (in that priority order: CLI args > env >
YAML > defaults).
"""

import os

import yaml

from .clang_format import FormatOptions


_DEFAULTS = {
    "clang_format_binary": "clang-format",
    "diff_binary": "diff",
    "git_binary": "git",
    "style": None,
    "fallback_style": None,
    "encoding": "utf-8",
    "revision": "HEAD",
    "log_dir": ".format_applier/logs",
}

# Config file search locations
_CONFIG_FILENAMES = [".format_applier.yaml", ".format_applier.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    # Search CWD first, then home directory
    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


class Config:
    """Application configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables
    3. .format_applier.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, default, cast=str):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return cast(yaml_val)
            return default

        self.CLANG_FORMAT_BINARY = _get("CLANG_FORMAT_BINARY", "clang_format_binary",
                                        _DEFAULTS["clang_format_binary"])
        self.DIFF_BINARY = _get("FORMAT_APPLIER_DIFF", "diff_binary",
                                _DEFAULTS["diff_binary"])
        self.GIT_BINARY = _get("FORMAT_APPLIER_GIT", "git_binary",
                               _DEFAULTS["git_binary"])

        # Style values may be YAML mappings like {BasedOnStyle: llvm}
        self.STYLE = _get("CLANG_FORMAT_STYLE", "style",
                          _DEFAULTS["style"], cast=_style_value)
        self.FALLBACK_STYLE = _get("CLANG_FORMAT_FALLBACK_STYLE", "fallback_style",
                                   _DEFAULTS["fallback_style"], cast=_style_value)

        self.ENCODING = _get("FORMAT_APPLIER_ENCODING", "encoding",
                             _DEFAULTS["encoding"])
        self.REVISION = _get("FORMAT_APPLIER_REVISION", "revision",
                             _DEFAULTS["revision"])

        # Log file directory
        self.LOG_DIR = _get("FORMAT_APPLIER_LOG_DIR", "log_dir",
                            _DEFAULTS["log_dir"])

    def format_options(
        self,
        assume_filename: str | None = None,
        style: str | None = None,
        fallback_style: str | None = None,
    ) -> FormatOptions:
        """Build the style options for one call; arguments override config."""
        return FormatOptions(
            style=style or self.STYLE,
            fallback_style=fallback_style or self.FALLBACK_STYLE,
            assume_filename=assume_filename,
        )

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)


def _style_value(value) -> str:
    """Render a style setting as clang-format's ``--style`` expects."""
    if isinstance(value, dict):
        inner = ", ".join(f"{k}: {v}" for k, v in value.items())
        return "{" + inner + "}"
    return str(value)
