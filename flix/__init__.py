"""Install command-line tools from git repositories or release binaries."""

__version__ = "0.2.3"