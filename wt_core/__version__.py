"""Version information for wt-core."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("wt-core")
except PackageNotFoundError:
    # Running from a source checkout that was never installed
    __version__ = "0.0.0+unknown"
