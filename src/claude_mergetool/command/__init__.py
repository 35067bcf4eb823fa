"""CLI command modules for claude-mergetool."""

from claude_mergetool.command.generate_config import GenerateConfigCommand
from claude_mergetool.command.install import InstallCommand
from claude_mergetool.command.merge import MergeCommand

__all__ = ["GenerateConfigCommand", "InstallCommand", "MergeCommand"]
