"""AI-powered merge conflict resolution for git and jj."""

__version__ = "0.1.0"
