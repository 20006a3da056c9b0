"""
Command-line interface for the Zotero Assistant MCP server.
"""

import argparse
import asyncio
import json
import shutil
import sys

from zotero_assistant.server import serve
from zotero_assistant.utils.config import get_config_file_path, load_config
from zotero_assistant.utils.logging_config import initialize_logging


def obfuscate_sensitive_value(value: str | None, keep_chars: int = 4) -> str | None:
    """Obfuscate sensitive values by showing only the first few characters."""
    if not value or not isinstance(value, str):
        return value
    if len(value) <= keep_chars:
        return "*" * len(value)
    return value[:keep_chars] + "*" * (len(value) - keep_chars)


def obfuscate_config_for_display(config: dict) -> dict:
    """Create a copy of config with sensitive values obfuscated."""
    if not isinstance(config, dict):
        return config

    obfuscated = config.copy()
    for key in ("ZOTERO_API_KEY", "ZOTERO_LIBRARY_ID"):
        if key in obfuscated:
            obfuscated[key] = obfuscate_sensitive_value(obfuscated[key])
    return obfuscated


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Zotero library assistant over the Model Context Protocol"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("serve", help="Run the MCP server over stdio")
    subparsers.add_parser("setup-info", help="Show installation and configuration info")
    subparsers.add_parser("version", help="Print version information")

    args = parser.parse_args()

    initialize_logging()

    if not args.command:
        args.command = "serve"

    if args.command == "version":
        from zotero_assistant import __version__

        print(f"Zotero Assistant MCP v{__version__}")
        sys.exit(0)

    elif args.command == "setup-info":
        config = load_config()
        env_vars = config.get("env", {})

        executable_path = (
            shutil.which("zotero-assistant-mcp")
            or sys.executable + " -m zotero_assistant.cli"
        )

        print("=== Zotero Assistant Setup Information ===")
        print()
        print("Installation:")
        print(f"  Command path: {executable_path}")
        print(f"  Python path: {sys.executable}")
        print(f"  Config file: {get_config_file_path()}")
        print()
        print("Configuration:")
        print(f"  Environment: {json.dumps(obfuscate_config_for_display(env_vars), indent=2)}")

        missing = [
            key for key in ("ZOTERO_API_KEY", "ZOTERO_LIBRARY_ID") if not env_vars.get(key)
        ]
        if missing:
            print()
            print(f"Missing required settings: {', '.join(missing)}")
            sys.exit(1)
        sys.exit(0)

    elif args.command == "serve":
        load_config()
        asyncio.run(serve())


if __name__ == "__main__":
    main()
