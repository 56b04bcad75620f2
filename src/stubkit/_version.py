"""Version of the installed stubkit distribution."""

from importlib.metadata import PackageNotFoundError, version

# Reported when the package is imported from a checkout that was never installed
UNINSTALLED_VERSION = "0.0.0+local"


def get_version() -> str:
    """Get the version recorded in the installed package metadata."""
    try:
        return version("stubkit")
    except PackageNotFoundError:
        return UNINSTALLED_VERSION
