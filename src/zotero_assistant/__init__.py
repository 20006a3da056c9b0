"""
Zotero Assistant.

A Model Context Protocol server that lets an agent save, attach, read and
update items in a Zotero library.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("zotero-assistant-mcp")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = ["__version__"]
