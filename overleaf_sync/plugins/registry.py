"""Plugin registry for discovering, loading, and managing command plugins."""

import importlib
import importlib.metadata
import logging
import pkgutil
from pathlib import Path
from typing import Dict, List, Set, Any, Optional

from .base import CommandCompletion, CommandPlugin, ServerCommand, UnknownContextServerError, UserCommand

logger = logging.getLogger(__name__)

# Entry point group names by plugin kind
PLUGIN_ENTRY_POINT_GROUPS = {
    "command": "overleaf_sync.plugins",
}


class PluginRegistry:
    """Manages plugin discovery, lifecycle, and user-command routing.

    Usage:
        registry = PluginRegistry()
        registry.discover()

        print(registry.list_available())  # ['overleaf']

        registry.expose('overleaf', config={'projects_dir': '~/Documents/overleaf'})

        commands = registry.get_user_commands()
        text = registry.execute_user_command('overleaf-projects', [])

        registry.unexpose_all()
    """

    def __init__(self):
        self._plugins: Dict[str, CommandPlugin] = {}
        self._exposed: Set[str] = set()
        self._configs: Dict[str, Dict[str, Any]] = {}

    def discover(
        self,
        plugin_kind: str = "command",
        include_directory: bool = True
    ) -> List[str]:
        """Discover plugins via entry points and optionally directory scanning.

        Discovery order:
        1. Entry points (group based on plugin_kind) - for installed packages
        2. Directory scanning (optional) - for development/local plugins

        Entry points allow external packages to register plugins:
            [project.entry-points."overleaf_sync.plugins"]
            my_plugin = "my_package.plugins:create_plugin"

        Args:
            plugin_kind: Kind of plugin to discover. Only plugins with
                        matching PLUGIN_KIND are loaded from the directory.
            include_directory: Also scan the plugins directory for local plugins.

        Returns:
            List of discovered plugin names.
        """
        discovered = []
        discovered.extend(self._discover_via_entry_points(plugin_kind))
        if include_directory:
            discovered.extend(self._discover_via_directory(plugin_kind))
        return discovered

    def _discover_via_entry_points(self, plugin_kind: str) -> List[str]:
        """Discover plugins registered via entry points."""
        discovered: List[str] = []

        entry_point_group = PLUGIN_ENTRY_POINT_GROUPS.get(plugin_kind)
        if not entry_point_group:
            return discovered

        for ep in importlib.metadata.entry_points(group=entry_point_group):
            if ep.name in self._plugins:
                continue

            try:
                plugin = ep.load()()
            except Exception as exc:
                logger.warning("Error loading entry point '%s': %s", ep.name, exc)
                continue

            if not isinstance(plugin, CommandPlugin):
                logger.warning("Entry point '%s': plugin does not implement CommandPlugin protocol", ep.name)
                continue

            if plugin.name in self._plugins:
                continue
            self._plugins[plugin.name] = plugin
            discovered.append(plugin.name)

        return discovered

    def _discover_via_directory(
        self,
        plugin_kind: str,
        plugin_dir: Optional[Path] = None
    ) -> List[str]:
        """Discover plugins by scanning the plugins directory.

        Scans for subpackages with a create_plugin() factory function and
        a matching PLUGIN_KIND.

        Args:
            plugin_kind: Kind of plugin to discover.
            plugin_dir: Directory to scan. Defaults to this package's directory.

        Returns:
            List of discovered plugin names.
        """
        if plugin_dir is None:
            plugin_dir = Path(__file__).parent

        discovered = []

        for _finder, name, _ispkg in pkgutil.iter_modules([str(plugin_dir)]):
            if name.startswith('_') or name in ('base', 'registry', 'conftest', 'tests'):
                continue

            if name in self._plugins:
                continue

            try:
                module = importlib.import_module(f".{name}", package=__package__)
            except Exception as exc:
                logger.warning("Error loading plugin '%s': %s", name, exc)
                continue

            if getattr(module, 'PLUGIN_KIND', None) != plugin_kind:
                continue
            if not hasattr(module, 'create_plugin'):
                continue

            plugin = module.create_plugin()
            if not isinstance(plugin, CommandPlugin):
                logger.warning("%s: plugin does not implement CommandPlugin protocol", name)
                continue
            if plugin.name in self._plugins:
                continue

            self._plugins[plugin.name] = plugin
            discovered.append(plugin.name)

        return discovered

    def list_available(self) -> List[str]:
        """List all discovered plugin names."""
        return list(self._plugins.keys())

    def list_exposed(self) -> List[str]:
        """List currently exposed plugin names."""
        return list(self._exposed)

    def is_exposed(self, name: str) -> bool:
        return name in self._exposed

    def get_plugin(self, name: str) -> Optional[CommandPlugin]:
        """Get a plugin by name, or None if not found."""
        return self._plugins.get(name)

    def register_plugin(
        self,
        plugin: CommandPlugin,
        expose: bool = False,
        config: Optional[Dict[str, Any]] = None
    ) -> None:
        """Manually register a plugin instance with the registry.

        Args:
            plugin: The plugin instance to register.
            expose: If True, also expose the plugin (calls initialize).
            config: Optional configuration dict used when exposing.
        """
        self._plugins[plugin.name] = plugin
        if expose:
            self.expose(plugin.name, config)

    def expose(self, name: str, config: Optional[Dict[str, Any]] = None) -> None:
        """Expose a plugin's commands to the user.

        Calls the plugin's initialize() method if this is the first time
        exposing it, or if a new config is provided.

        Args:
            name: Plugin name to expose.
            config: Optional configuration dict for the plugin.

        Raises:
            ValueError: If the plugin is not found.
        """
        if name not in self._plugins:
            raise ValueError(f"Plugin '{name}' not found. Available: {self.list_available()}")

        plugin = self._plugins[name]

        if name not in self._exposed:
            plugin.initialize(config)
            if config:
                self._configs[name] = config
            self._exposed.add(name)
        elif config and config != self._configs.get(name):
            plugin.shutdown()
            plugin.initialize(config)
            self._configs[name] = config

    def unexpose(self, name: str) -> None:
        """Stop exposing a plugin's commands and shut it down."""
        if name in self._exposed:
            self._plugins[name].shutdown()
            self._exposed.discard(name)
            self._configs.pop(name, None)

    def unexpose_all(self) -> None:
        for name in list(self._exposed):
            self.unexpose(name)

    def get_user_commands(self) -> Dict[str, UserCommand]:
        """Map command names to declarations for all exposed plugins."""
        commands: Dict[str, UserCommand] = {}
        for name in sorted(self._exposed):
            for command in self._plugins[name].get_user_commands():
                commands[command.name] = command
        return commands

    def get_plugin_for_command(self, command_name: str) -> Optional[CommandPlugin]:
        """Get the exposed plugin that executes a command."""
        for name in sorted(self._exposed):
            plugin = self._plugins[name]
            if command_name in plugin.get_executors():
                return plugin
        return None

    def execute_user_command(self, command_name: str, args: Optional[List[str]] = None) -> str:
        """Execute a user command.

        Args:
            command_name: Name of the command to execute (without '/').
            args: Positional arguments typed after the command name.

        Returns:
            The command's text result.

        Raises:
            ValueError: If the command is not found.
        """
        plugin = self.get_plugin_for_command(command_name)
        if plugin is None:
            raise ValueError(f"Unknown command: {command_name}")
        logger.debug("Executing /%s via plugin '%s'", command_name, plugin.name)
        return plugin.get_executors()[command_name](list(args or []))

    def get_command_completions(self, command_name: str, args: List[str]) -> List[CommandCompletion]:
        """Ask the owning plugin for argument completions, if it offers any."""
        plugin = self.get_plugin_for_command(command_name)
        if plugin is None or not hasattr(plugin, 'get_command_completions'):
            return []
        return plugin.get_command_completions(command_name, args)

    def context_server_command(self, server_id: str) -> ServerCommand:
        """Return the start command for a context server.

        Raises:
            UnknownContextServerError: If no exposed plugin provides server_id.
        """
        for name in sorted(self._exposed):
            plugin = self._plugins[name]
            if server_id in getattr(plugin, 'get_context_servers', lambda: [])():
                return plugin.context_server_command(server_id)
        raise UnknownContextServerError(server_id)
