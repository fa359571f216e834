"""Version and instrumentation scope of the bridge."""

__version__ = "0.1.0"

SCOPE_NAME = "ocbridge"
"""Instrumentation scope name recorded on every span the bridge creates."""


def version() -> str:
    """Return the semantic version of the bridge.

    This is recorded as the instrumentation scope version of every span.
    """
    return __version__
