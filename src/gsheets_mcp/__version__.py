"""Version information for gsheets-mcp."""

from importlib.metadata import PackageNotFoundError, version


def _get_version() -> str:
    """Get the installed distribution version, or a placeholder when running from source."""
    try:
        return version("gsheets-mcp")
    except PackageNotFoundError:
        return "0.0.0+unknown"


__version__ = _get_version()
