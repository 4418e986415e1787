"""Base protocol for command plugins."""

from dataclasses import dataclass, field
from typing import Protocol, List, Dict, Any, Callable, Optional, NamedTuple, runtime_checkable


# Executor signature for user commands.
#
# Parameters:
#   args: Positional arguments typed after the command name.
#
# Returns the text shown to the user. Executors encode failures in the
# returned text instead of raising.
CommandExecutor = Callable[[List[str]], str]


class CommandCompletion(NamedTuple):
    """A completion option for command arguments.

    Used by plugins to provide autocompletion hints for their user commands.

    Attributes:
        value: The completion value to insert.
        description: Brief description shown in completion menu.
    """
    value: str
    description: str = ""


class UserCommand(NamedTuple):
    """Declaration of a user-facing slash-command.

    Attributes:
        name: Command name for invocation and autocompletion (without '/').
        description: Brief description shown in autocompletion/help.
        usage: Argument synopsis shown in help (e.g. '<project_id>').
    """
    name: str
    description: str
    usage: str = ""


@dataclass
class ServerCommand:
    """Command the host runs to start a context server.

    Attributes:
        command: Executable to launch.
        args: Arguments passed to the executable.
        env: Extra environment variables for the process.
    """
    command: str
    args: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)


class UnknownContextServerError(Exception):
    """Raised when the host asks for a context server nobody provides."""

    def __init__(self, server_id: str):
        self.server_id = server_id
        super().__init__(f"Unknown context server: {server_id}")


@runtime_checkable
class CommandPlugin(Protocol):
    """Interface that all command plugins must implement.

    A command plugin declares slash-commands via get_user_commands() and
    executes them via get_executors(). Executors take the positional
    arguments typed after the command name and return plain text.
    """

    @property
    def name(self) -> str:
        """Unique identifier for this plugin."""
        ...

    def initialize(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Called once when the plugin is exposed.

        Args:
            config: Optional configuration dict for plugin-specific settings.
        """
        ...

    def shutdown(self) -> None:
        """Called when the plugin is unexposed. Clean up resources here."""
        ...

    def get_user_commands(self) -> List[UserCommand]:
        """Return the slash-commands this plugin provides."""
        ...

    def get_executors(self) -> Dict[str, CommandExecutor]:
        """Return a mapping of command names to their executor callables."""
        ...

    # ==================== Optional Protocol Extensions ====================
    #
    # Command Completions:
    #
    # def get_command_completions(
    #     self,
    #     command: str,
    #     args: List[str]
    # ) -> List[CommandCompletion]:
    #     """Return completion options for a user command's arguments."""
    #     ...
    #
    # Context Servers:
    #
    # def get_context_servers(self) -> List[str]:
    #     """Return the context server ids this plugin can start."""
    #     ...
    #
    # def context_server_command(self, server_id: str) -> ServerCommand:
    #     """Return the command that starts the given context server.
    #
    #     Raises:
    #         UnknownContextServerError: If server_id is not provided here.
    #     """
    #     ...
