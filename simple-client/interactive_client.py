#!/usr/bin/env python3
"""Simple console host for the Overleaf slash-commands.

Plays the part of the editor host: loads the environment, discovers and
exposes plugins, then reads `/command args...` lines and prints the text
each command returns. Runs interactively or executes a single command.
"""

import json
import logging
import os
import pathlib
import shlex
import sys
from dataclasses import asdict
from typing import List, Optional, Tuple

# Add project root to path for imports
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dotenv import load_dotenv

from overleaf_sync import PluginRegistry, UnknownContextServerError

from terminal_ui import TerminalUI
from input_handler import InputHandler, SlashCommandCompleter


# Commands whose argument text is passed through untouched (cookies may
# contain quotes and backslashes).
RAW_ARGUMENT_COMMANDS = ("overleaf-login",)


def split_command_line(line: str) -> Tuple[str, List[str]]:
    """Split '/name arg1 arg2' into ('name', ['arg1', 'arg2']).

    Quotes group arguments; unbalanced quotes fall back to whitespace split.
    For RAW_ARGUMENT_COMMANDS the text after the name is one argument, as typed.
    """
    head = line.split(None, 1)
    if not head:
        return "", []
    name = head[0].lstrip('/')
    if name in RAW_ARGUMENT_COMMANDS:
        return name, head[1:]

    try:
        parts = shlex.split(line)
    except ValueError:
        parts = line.split()
    return name, parts[1:]


class InteractiveClient:
    """Console host that routes slash-commands to exposed plugins."""

    def __init__(
        self,
        env_file: str = ".env",
        verbose: bool = True,
        config_path: Optional[str] = None,
        use_color: bool = True
    ):
        self.verbose = verbose
        self.env_file = env_file
        self.config_path = config_path
        self.registry: Optional[PluginRegistry] = None
        self._ui = TerminalUI(use_color=use_color)

    def log(self, msg: str) -> None:
        """Print message if verbose mode is enabled, with colorized [client] tag."""
        if self.verbose:
            if msg.startswith('[client]'):
                msg = self._ui.colorize('[client]', 'cyan') + msg[8:]
            print(msg)

    def initialize(self) -> bool:
        """Load the environment and expose the Overleaf plugin."""
        env_path = ROOT / self.env_file
        if env_path.exists():
            load_dotenv(env_path)
        else:
            load_dotenv(self.env_file)

        self.log("[client] Discovering plugins...")
        self.registry = PluginRegistry()
        discovered = self.registry.discover()
        self.log(f"[client] Found plugins: {discovered}")

        config = {"config_path": self.config_path} if self.config_path else None
        try:
            self.registry.expose("overleaf", config=config)
        except Exception as e:
            print(f"Error: Failed to initialize overleaf plugin: {e}")
            return False

        self.log(f"[client] Registered {len(self.registry.get_user_commands())} command(s)")
        return True

    def execute(self, line: str) -> str:
        """Run one command line and return its text result."""
        name, args = split_command_line(line)
        if self.registry.get_plugin_for_command(name) is None:
            return f"Unknown command: {name}"
        return self.registry.execute_user_command(name, args)

    def help_text(self) -> str:
        lines = ["Commands:"]
        for name, cmd in sorted(self.registry.get_user_commands().items()):
            usage = f"/{name} {cmd.usage}".rstrip()
            lines.append(f"  {usage:<34} {cmd.description}")
        lines.append(f"  {'help':<34} Show this help message")
        lines.append(f"  {'quit / exit':<34} Leave the client")
        return "\n".join(lines)

    def context_server(self, server_id: str) -> str:
        """Return the start command for a context server as JSON.

        Raises:
            UnknownContextServerError: If no plugin provides server_id.
        """
        return json.dumps(asdict(self.registry.context_server_command(server_id)), indent=2)

    def run(self) -> None:
        """Read and execute commands until quit/exit or end of input."""
        completer = SlashCommandCompleter(
            self.registry.get_user_commands,
            self.registry.get_command_completions,
        )
        handler = InputHandler(completer)

        print("Overleaf console. Type 'help' for commands, 'quit' to leave.\n")
        while True:
            try:
                line = handler.get_input("overleaf> ")
            except (EOFError, KeyboardInterrupt):
                print()
                break

            if not line:
                continue
            if line.lower() in ("quit", "exit"):
                break
            if line.lower() == "help":
                print(self.help_text())
                continue

            print(self._ui.format_result(self.execute(line)))
            print()

    def shutdown(self) -> None:
        if self.registry:
            self.registry.unexpose_all()


def main(argv: Optional[List[str]] = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(
        description="Console host for the Overleaf slash-commands"
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to .env file (default: .env)"
    )
    parser.add_argument(
        "--config",
        help="Path to an Overleaf config.json (default: ~/.overleaf-zed/config.json)"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Reduce verbose output"
    )
    parser.add_argument(
        "--command", "-c",
        type=str,
        help="Run a single command (e.g. '/overleaf-projects') and exit"
    )
    parser.add_argument(
        "--context-server",
        metavar="ID",
        help="Print the command that starts context server ID as JSON and exit"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    one_shot = bool(args.command or args.context_server)
    client = InteractiveClient(
        env_file=args.env_file,
        verbose=not (args.quiet or one_shot),
        config_path=args.config,
        use_color=sys.stdout.isatty() and not os.environ.get("NO_COLOR"),
    )

    if not client.initialize():
        return 1

    try:
        if args.context_server:
            try:
                print(client.context_server(args.context_server))
            except UnknownContextServerError as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1
        elif args.command:
            print(client.execute(args.command))
        else:
            client.run()
    finally:
        client.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
