"""Overleaf plugin: slash-commands for an Overleaf account.

Each command either writes the credential file or runs one of the external
Overleaf scripts from the extension directory and relays its output as text.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..base import CommandCompletion, ServerCommand, UnknownContextServerError, UserCommand
from .commands import (
    CommandKind,
    CompileCommand,
    DownloadCommand,
    LoginCommand,
    MissingArgumentError,
    ProjectsCommand,
    UnknownCommandError,
    parse_command,
)
from .config_loader import ConfigValidationError, OverleafConfig, load_overleaf_config
from .credentials import CredentialStore, CredentialStoreError
from .runner import ExecutionResult, ProcessRunner

logger = logging.getLogger(__name__)


CONTEXT_SERVER_ID = "overleaf"


class OverleafPlugin:
    """Plugin that exposes the Overleaf slash-commands.

    Configuration:
        config_path: Path to a config.json (default: ~/.overleaf-zed/config.json).
        Any OverleafConfig field (snake_case) overrides the loaded value,
        e.g. config_dir, extension_dir, projects_dir, node_path, timeout.
    """

    def __init__(self):
        self._config: OverleafConfig = OverleafConfig()
        self._store: Optional[CredentialStore] = None
        self._runner: Optional[ProcessRunner] = None
        self._initialized = False

    @property
    def name(self) -> str:
        return "overleaf"

    @property
    def config(self) -> OverleafConfig:
        return self._config

    def initialize(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the Overleaf plugin.

        Args:
            config: Optional dict with config_path and OverleafConfig overrides.

        Raises:
            ConfigValidationError: If the config file is invalid.
        """
        config = config or {}
        loaded = load_overleaf_config(config.get('config_path'))
        self._config = loaded.with_overrides(config)
        self._store = CredentialStore(self._config.config_dir, self._config.server_url)
        self._runner = ProcessRunner(
            extra_paths=self._config.extra_paths,
            timeout=self._config.timeout,
        )
        self._initialized = True
        logger.info("Overleaf plugin initialized (extension dir: %s)", self._config.extension_dir)

    def shutdown(self) -> None:
        """Shutdown the Overleaf plugin."""
        self._store = None
        self._runner = None
        self._initialized = False

    def get_user_commands(self) -> List[UserCommand]:
        return [
            UserCommand(CommandKind.LOGIN.slash_name, "Save your Overleaf session cookie", "<cookie>"),
            UserCommand(CommandKind.PROJECTS.slash_name, "List your Overleaf projects"),
            UserCommand(CommandKind.DOWNLOAD.slash_name, "Download a project", "<project_id>"),
            UserCommand(CommandKind.COMPILE.slash_name, "Compile a project to PDF", "<project_id>"),
        ]

    def get_executors(self) -> Dict[str, Callable[[List[str]], str]]:
        """Return the executor mapping, one per slash-command."""
        return {
            kind.slash_name: (lambda args, _kind=kind: self.dispatch(_kind.value, args))
            for kind in CommandKind
        }

    def get_command_completions(self, command: str, args: List[str]) -> List[CommandCompletion]:
        """Offer the locally downloaded project ids for compile."""
        if command != CommandKind.COMPILE.slash_name or len(args) > 1:
            return []
        projects_dir = self._config.resolved_projects_dir
        if not projects_dir.is_dir():
            return []
        prefix = args[0] if args else ""
        return [
            CommandCompletion(entry.name, "downloaded project")
            for entry in sorted(projects_dir.iterdir())
            if entry.is_dir() and entry.name.startswith(prefix)
        ]

    # --- Context server ---

    def get_context_servers(self) -> List[str]:
        return [CONTEXT_SERVER_ID]

    def context_server_command(self, server_id: str) -> ServerCommand:
        """Return the command that starts the Overleaf MCP server.

        Raises:
            UnknownContextServerError: If server_id is not 'overleaf'.
        """
        if server_id != CONTEXT_SERVER_ID:
            raise UnknownContextServerError(server_id)
        script = self._config.extension_dir / self._config.server_script
        return ServerCommand(command=self._config.node_path, args=[str(script)])

    # --- Dispatch ---

    def dispatch(self, name: str, args: List[str]) -> str:
        """Run a command by name and return its text result.

        Never raises: unknown names, usage errors and external failures are
        all rendered as text.
        """
        try:
            command = parse_command(name, args)
        except UnknownCommandError:
            return f"Unknown command: {name}"
        except MissingArgumentError as e:
            return e.usage

        handlers: Dict[type, Callable[[Any], str]] = {
            LoginCommand: lambda c: self.login(c.secret),
            ProjectsCommand: lambda c: self.list_projects(),
            DownloadCommand: lambda c: self.download_project(c.project_id),
            CompileCommand: lambda c: self.compile_project(c.project_id),
        }
        return handlers[type(command)](command)

    def _ensure_initialized(self) -> Optional[str]:
        """Initialize on first use. Returns failure text if the config is invalid."""
        if self._initialized:
            return None
        try:
            self.initialize()
        except ConfigValidationError as e:
            logger.error("Invalid Overleaf configuration: %s", e)
            return f"❌ Invalid configuration.\n\nError: {e}"
        return None

    def login(self, secret: str) -> str:
        """Save the session cookie."""
        try:
            command = parse_command(CommandKind.LOGIN.value, [secret])
        except MissingArgumentError as e:
            return e.usage
        error = self._ensure_initialized()
        if error:
            return error

        try:
            self._store.save(command.secret)
        except CredentialStoreError as e:
            logger.error("Failed to save credentials: %s", e)
            return f"❌ Failed to save cookie.\n\nError: {e}"

        return (
            "✅ Login successful! Cookie saved.\n\n"
            "Now you can:\n"
            f"- /{CommandKind.PROJECTS.slash_name} - List your projects\n"
            f"- /{CommandKind.DOWNLOAD.slash_name} <project_id> - Download a project\n"
            f"- /{CommandKind.COMPILE.slash_name} <project_id> - Compile a project"
        )

    def list_projects(self) -> str:
        """List remote projects via the external lister script."""
        error = self._ensure_initialized()
        if error:
            return error
        result = self._run_node(self._config.list_script)
        if result.success:
            return result.stdout
        return self._format_failure("Failed to list projects.", result)

    def download_project(self, project_id: str) -> str:
        """Download a project via the external download script."""
        try:
            command = parse_command(CommandKind.DOWNLOAD.value, [project_id])
        except MissingArgumentError as e:
            return e.usage
        error = self._ensure_initialized()
        if error:
            return error

        result = self._run_node(self._config.download_script, command.project_id)
        if not result.success:
            return self._format_failure("Failed to download project.", result)

        location = self._config.resolved_projects_dir / command.project_id
        return (
            "✅ Project downloaded!\n\n"
            f"Location: {location}\n\n"
            "Open with: Cmd+O → Select folder"
        )

    def compile_project(self, project_id: str) -> str:
        """Compile a project via the external compile script."""
        try:
            command = parse_command(CommandKind.COMPILE.value, [project_id])
        except MissingArgumentError as e:
            return e.usage
        error = self._ensure_initialized()
        if error:
            return error

        result = self._runner.run(
            self._config.shell_path,
            [self._config.compile_script, command.project_id],
            str(self._config.extension_dir),
        )
        if not result.success:
            return self._format_failure("Compilation failed.", result)

        pdf = self._config.resolved_projects_dir / command.project_id / "output.pdf"
        return f"✅ Compilation complete!\n\nPDF: {pdf}"

    def _run_node(self, script: str, *args: str) -> ExecutionResult:
        return self._runner.run(
            self._config.node_path,
            [script, *args],
            str(self._config.extension_dir),
        )

    @staticmethod
    def _format_failure(summary: str, result: ExecutionResult) -> str:
        if result.error is not None:
            logger.warning("External command could not run: %s", result.error)
            return f"❌ Failed to execute command: {result.error}"
        logger.warning("External command exited with status %s", result.returncode)
        return f"❌ {summary}\n\nError: {result.stderr}"


def create_plugin() -> OverleafPlugin:
    """Factory function to create the Overleaf plugin instance."""
    return OverleafPlugin()
