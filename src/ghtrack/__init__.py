"""gh-tracker: mirror GitHub issues and pull requests into a markdown vault."""

__version__ = "0.3.0"
