"""Overleaf plugin exposing /overleaf-* slash-commands.

Commands save the session cookie or run the external Overleaf scripts
(list, download, compile) and relay their output as text.
"""

from .plugin import OverleafPlugin, create_plugin

# Plugin kind identifier for registry discovery
PLUGIN_KIND = "command"

__all__ = [
    'OverleafPlugin',
    'create_plugin',
]
