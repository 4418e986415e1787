"""Command plugins and the registry that discovers them."""

from .base import (
    CommandCompletion,
    CommandPlugin,
    ServerCommand,
    UnknownContextServerError,
    UserCommand,
)
from .registry import PluginRegistry

__all__ = [
    'CommandCompletion',
    'CommandPlugin',
    'PluginRegistry',
    'ServerCommand',
    'UnknownContextServerError',
    'UserCommand',
]
