"""
Platform abstraction layer for fileicon.

This module picks the filesystem backend and icon generator for the
current platform.

Platform-specific implementations:
- macOS/Darwin: icon_darwin.py
- Anywhere (tests, tooling): memory.py
"""

import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .backend import FilesystemBackend, IconGenerator


def supports_custom_icons() -> bool:
    """Check if the current platform stores custom icons in resource forks.

    Returns:
        True on macOS
    """
    return sys.platform.startswith("darwin")


def get_backend(debug: bool = False, allow_memory: bool = False) -> "FilesystemBackend":
    """Get the filesystem backend for the current platform.

    Args:
        debug: Enable debug output
        allow_memory: Fall back to an in-memory filesystem off macOS

    Returns:
        Backend instance

    Raises:
        RuntimeError: platform unsupported and allow_memory not set
    """
    if supports_custom_icons():
        from .icon_darwin import DarwinFilesystem
        return DarwinFilesystem(debug=debug)

    if allow_memory:
        from .memory import MemoryFilesystem
        return MemoryFilesystem(debug=debug)

    raise RuntimeError(f"Custom icons are not supported on platform '{sys.platform}'")


def get_icon_generator(backend: "FilesystemBackend", debug: bool = False) -> "IconGenerator":
    """Get the icon generator matching a backend.

    Args:
        backend: The backend the generator should write through
        debug: Enable debug output

    Returns:
        Generator instance
    """
    from .memory import MemoryFilesystem

    if isinstance(backend, MemoryFilesystem):
        from .memory import MemoryIconGenerator
        return MemoryIconGenerator(backend, debug=debug)

    if supports_custom_icons():
        from .icon_darwin import CocoaIconGenerator
        return CocoaIconGenerator(debug=debug)

    raise RuntimeError(f"No icon generator available on platform '{sys.platform}'")
