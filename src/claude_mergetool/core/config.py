"""Application state and configuration."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import platformdirs
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from claude_mergetool.conflict.prompt import (
    DEFAULT_SYSTEM_TEMPLATE,
    DEFAULT_USER_TEMPLATE,
)
from claude_mergetool.core.base import BaseConfig, BaseState
from claude_mergetool.core.log import Logger
from claude_mergetool.core.result import RunOutcome
from claude_mergetool.core.yaml_settings import (
    APP_NAME,
    YamlWithIncludesSettingsSource,
)

# Names usable in {module.attr} templates inside YAML values, e.g.
# {platformdirs.user_cache_dir} or {os.getcwd}
TEMPLATE_NAMESPACE = {
    'os': os,
    'platformdirs': platformdirs,
    'Path': Path,
}


# ============================================================
# CONFIG MODELS (loaded from YAML/env/CLI)
# ============================================================

class ResolverConfig(BaseConfig):
    """External resolver process settings."""

    program: str = Field(
        default="claude",
        description="Resolver executable, looked up on PATH",
    )
    permission_mode: str = Field(
        default="acceptEdits",
        description=(
            "Value for --permission-mode; must let the resolver "
            "edit files without asking"
        ),
    )
    extra_args: list[str] = Field(
        default_factory=list,
        description="Additional arguments passed to the resolver",
    )
    extra_system_prompt: str | None = Field(
        default=None,
        description="Text appended to the system prompt",
    )
    verify_output: bool = Field(
        default=False,
        description=(
            "Fail when the resolver exits 0 without changing the "
            "destination file"
        ),
    )


class PromptConfig(BaseConfig):
    """Prompt templates rendered with str.format."""

    system: str = Field(
        default=DEFAULT_SYSTEM_TEMPLATE,
        description=(
            "System prompt. Fields: filepath, base_label (' (LABEL)' "
            "or empty), left_label, right_label"
        ),
    )
    user: str = Field(
        default=DEFAULT_USER_TEMPLATE,
        description=(
            "Task prompt. Fields: filepath, base, left, right, "
            "base_label, left_label, right_label, marker_note, "
            "destination"
        ),
    )


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger = Field(
        default_factory=Logger,
        description="Logger configuration and runtime instance",
    )
    resolver: ResolverConfig = Field(
        default_factory=ResolverConfig,
        description="Resolver process settings",
    )
    prompts: PromptConfig = Field(
        default_factory=PromptConfig,
        description="Prompt templates",
    )
    log_level: str | None = Field(
        default=None,
        alias="log-level",
        description=(
            "Console log level override: 'spew', 'trace', 'debug', "
            "'info', 'warn', 'error', 'fatal'"
        ),
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir(APP_NAME,
                                                     appauthor=False))
        ),
        description=(
            "Root directory for log files "
            "(supports {platformdirs.*} templates)"
        ),
    )
    event_log: bool = Field(
        default=True,
        description=(
            "Record raw resolver events under {log_root}/logs"
        ),
    )

    model_config = ConfigDict(populate_by_name=True)

    def setup_logging(self) -> None:
        """Install the global logger from this configuration."""
        from claude_mergetool.core.log import setup_logger

        console = self.logger.console
        if self.log_level:
            console.level = self.log_level

        setup_logger(
            log_root=self.log_root,
            run_name=APP_NAME,
            level=self.logger.level,
            console=console,
            file=self.logger.file,
            logfire=self.logger.logfire,
        )

    def close(self):
        """Close the global logger, then any closeable children."""
        from claude_mergetool.core.log import logger
        logger.close()

        super().close()


# ============================================================
# RUNTIME STATE MODELS (mutable while a command runs)
# ============================================================

class MergeState(BaseState):
    """Progress of the merge pipeline."""

    stage: str = Field(
        default="pending",
        description=(
            "Last stage entered: pending, mode, input, prompt, "
            "launch, resolver, deliver, done"
        ),
    )
    outcome: RunOutcome | None = Field(
        default=None,
        description="Terminal outcome once the pipeline finishes",
    )

    model_config = ConfigDict(arbitrary_types_allowed=True)


class Runtime(BaseModel):
    """Runtime state grouped by command."""

    merge: MergeState = Field(
        default_factory=MergeState,
        description="Merge pipeline runtime state",
    )


# ============================================================
# STATE (config + runtime combined)
# ============================================================

class State(BaseSettings):
    """Configuration plus runtime state; flows through every command.

    Sources, highest priority first: init arguments, YAML layers
    (see YamlWithIncludesSettingsSource), .env, environment
    variables prefixed CLAUDE_MERGETOOL_ with __ nesting.
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration (from YAML/env/CLI)",
    )
    runtime: Runtime = Field(
        default_factory=Runtime,
        description="Runtime state (mutates during execution)",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to include and merge. "
            "Use --include on CLI or include: in YAML files."
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file=f"{APP_NAME}.yaml",
        env_file=".env",
        env_prefix="CLAUDE_MERGETOOL_",
        env_nested_delimiter="__",
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        # .env files belong to the repository being merged
        extra='ignore',
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )

    @model_validator(mode="after")
    def substitute_templates(self) -> State:
        """Expand {config.*} and {module.attr} templates, then start
        logging with the final values."""
        self._substitute_recursive(self)
        self.config.setup_logging()
        return self

    def _substitute_recursive(self, obj: Any) -> None:
        if isinstance(obj, BaseModel):
            for field_name in obj.__class__.model_fields:
                value = getattr(obj, field_name)
                new_value = self._substitute_value(value)
                if new_value is not value:
                    setattr(obj, field_name, new_value)
        elif isinstance(obj, dict):
            for key in obj:
                obj[key] = self._substitute_value(obj[key])
        elif isinstance(obj, list):
            for i in range(len(obj)):
                obj[i] = self._substitute_value(obj[i])

    def _substitute_value(self, value: Any) -> Any:
        if isinstance(value, str):
            new = self._substitute_string(value)
            return value if new == value else new
        elif isinstance(value, Path):
            new = self._substitute_string(str(value))
            return value if new == str(value) else Path(new)
        elif isinstance(value, (BaseModel, dict, list)):
            self._substitute_recursive(value)
            return value
        return value

    def _substitute_string(self, value: str) -> str:
        """Replace {dotted.path} references with their values.

        Unresolvable references are left as they are, so str.format
        placeholders such as {filepath} in prompt templates survive.

        Examples:
            "{config.log_root}/extra" -> "/home/u/.local/state/..."
            "{platformdirs.user_cache_dir}" -> "/home/u/.cache/..."
        """
        def replace_template(match):
            parts = match.group(1).split(".")

            if parts[0] in TEMPLATE_NAMESPACE:
                obj = TEMPLATE_NAMESPACE[parts[0]]
                parts = parts[1:]
            elif len(parts) > 1:
                obj = self
            else:
                return match.group(0)

            try:
                for part in parts:
                    obj = getattr(obj, part)

                if callable(obj):
                    module = getattr(obj, '__module__', None)
                    if module == platformdirs.__name__:
                        obj = obj(APP_NAME, appauthor=False)
                    else:
                        obj = obj()

                return str(obj)
            except (AttributeError, TypeError):
                return match.group(0)

        return re.sub(r'\{([A-Za-z_][A-Za-z_.]*)\}', replace_template, value)


__all__ = [
    "State",
    "Config",
    "ResolverConfig",
    "PromptConfig",
    "MergeState",
    "BaseConfig",
    "BaseState",
]
