"""release-tool: version publishing and directory-to-image packaging."""

__version__ = "0.3.0"
