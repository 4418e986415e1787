"""
overleaf-sync - Overleaf slash-commands for editor hosts

Public API for hosts and external plugins.
"""

# Plugin system
from overleaf_sync.plugins.registry import PluginRegistry
from overleaf_sync.plugins.base import (
    CommandCompletion,
    CommandPlugin,
    ServerCommand,
    UnknownContextServerError,
    UserCommand,
)

# Overleaf plugin
from overleaf_sync.plugins.overleaf import OverleafPlugin
from overleaf_sync.plugins.overleaf.config_loader import (
    ConfigValidationError,
    OverleafConfig,
    load_overleaf_config,
)
from overleaf_sync.plugins.overleaf.credentials import (
    CredentialRecord,
    CredentialStore,
    CredentialStoreError,
)
from overleaf_sync.plugins.overleaf.runner import ExecutionResult, ProcessRunner

# Public API
__all__ = [
    # Plugin system
    "PluginRegistry",
    "CommandCompletion",
    "CommandPlugin",
    "ServerCommand",
    "UnknownContextServerError",
    "UserCommand",

    # Overleaf plugin
    "OverleafPlugin",
    "OverleafConfig",
    "ConfigValidationError",
    "load_overleaf_config",
    "CredentialRecord",
    "CredentialStore",
    "CredentialStoreError",
    "ExecutionResult",
    "ProcessRunner",
]

__version__ = "0.1.0"
