"""Layered YAML configuration with include: directive support."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import yaml
from platformdirs import user_config_dir
from pydantic_settings import BaseSettings, YamlConfigSettingsSource

from claude_mergetool.core.log import logger

APP_NAME = "claude-mergetool"
PROJECT_CONFIG = Path(f"{APP_NAME}.yaml")
DEFAULTS_FILE = Path(__file__).parent.parent / "defaults" / "default.yaml"


def user_config_path() -> Path:
    """Platform-specific location of the user config file."""
    return Path(user_config_dir(APP_NAME, appauthor=False)) / "config.yaml"


def cli_includes(argv: list[str]) -> list[str]:
    """Collect the values of every ``--include FILE`` pair in argv."""
    includes = []
    i = 1
    while i < len(argv):
        if argv[i] == "--include" and i + 1 < len(argv):
            includes.append(argv[i + 1])
            i += 1
        i += 1
    return includes


class YamlWithIncludesSettingsSource(YamlConfigSettingsSource):
    """YAML settings source layering several files.

    Deep merge order, later wins:
        package defaults < user config < project config < includes.
    Any file may pull in others with an ``include:`` key.
    """

    def __init__(
        self, settings_cls: type[BaseSettings], yaml_file=None
    ):
        """Initialize, picking up ``--include`` files from sys.argv.

        Args:
            settings_cls: The Settings class being initialized
            yaml_file: Optional extra file(s) loaded after the
                standard locations
        """
        includes = cli_includes(sys.argv)

        base = yaml_file or settings_cls.model_config.get("yaml_file")
        if base and includes:
            yaml_file = (
                [base] if isinstance(base, (str, os.PathLike)) else list(base)
            ) + includes
        elif includes:
            yaml_file = includes
        else:
            yaml_file = base

        super().__init__(settings_cls, yaml_file)

    def _read_files(self, files, **kwargs):  # noqa: ARG002
        """Load and deep-merge every configuration layer that exists.

        Args:
            files: Extra file path(s) from yaml_file and --include
            kwargs: Merge options from newer pydantic-settings; layers
                here are always deep-merged

        Returns:
            Deep-merged dictionary of all loaded data
        """
        result = {}

        files_to_load = [DEFAULTS_FILE, user_config_path()]
        extra = []
        if files:
            if isinstance(files, (str, os.PathLike)):
                files = [files]
            extra = [Path(f).expanduser() for f in files]

        # The project file is the default yaml_file; avoid loading twice
        if PROJECT_CONFIG not in extra:
            files_to_load.append(PROJECT_CONFIG)
        files_to_load.extend(extra)

        for file_path in files_to_load:
            if file_path.is_file():
                with logger.span(
                    "Configuration loading", file=str(file_path)
                ):
                    data = self._load_file_recursive(file_path, set())
                    result = self._deep_merge(result, data)
            else:
                logger.debug(
                    "Configuration file not found (skipping)",
                    file=str(file_path),
                )

        return result

    def _load_file_recursive(
        self, filepath: Path, visited: set[Path]
    ) -> dict:
        """Load one file, resolving include: directives depth first.

        Raises:
            ValueError: If an include cycle is found
            FileNotFoundError: If an included file is missing
        """
        filepath = filepath.resolve()
        if filepath in visited:
            raise ValueError(f"Circular include: {filepath}")
        visited.add(filepath)

        with open(filepath, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if "include" in data:
            includes = data.pop("include")
            if isinstance(includes, str):
                includes = [includes]

            for inc in includes:
                inc_path = self._resolve_path(inc, filepath)
                inc_data = self._load_file_recursive(inc_path, visited.copy())
                # Including file overrides what it includes
                data = self._deep_merge(inc_data, data)

        return data

    @staticmethod
    def _resolve_path(include_path: str, relative_to: Path) -> Path:
        path = Path(include_path).expanduser()
        if path.is_absolute():
            return path
        return (relative_to.parent / path).resolve()

    def _deep_merge(self, base: dict, override: dict) -> dict:
        """Return base updated recursively with override."""
        result = base.copy()
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result
