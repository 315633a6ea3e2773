"""Version information for apt-repo-tool."""

__version__ = "1.0.0"
