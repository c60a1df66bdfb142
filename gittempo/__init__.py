"""gittempo: commit activity charts for GitHub repositories."""

__version__ = "0.1.0"
