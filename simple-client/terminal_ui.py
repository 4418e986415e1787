"""Terminal UI utilities for console output formatting.

Provides ANSI colors for command results.
"""

from typing import Optional


# Result texts start with one of these markers
SUCCESS_MARKER = "✅"
FAILURE_MARKER = "❌"


class TerminalUI:
    """Utility class for terminal formatting operations."""

    # ANSI color codes
    COLORS = {
        'reset': '\033[0m',
        'bold': '\033[1m',
        'dim': '\033[2m',
        'green': '\033[32m',
        'cyan': '\033[36m',
        'red': '\033[31m',
        'yellow': '\033[33m',
    }

    def __init__(self, use_color: bool = True):
        self.use_color = use_color

    def colorize(self, text: str, color: str) -> str:
        """Apply ANSI color to text.

        Args:
            text: The text to colorize.
            color: Color name from COLORS dict.

        Returns:
            Text wrapped with ANSI color codes, or original text if color
            not found or colors are disabled.
        """
        code = self.COLORS.get(color, '') if self.use_color else ''
        return f"{code}{text}{self.COLORS['reset']}" if code else text

    def result_color(self, text: str) -> Optional[str]:
        """Pick a color for a command result from its leading marker."""
        stripped = text.lstrip()
        if stripped.startswith(SUCCESS_MARKER):
            return 'green'
        if stripped.startswith(FAILURE_MARKER) or stripped.startswith("Unknown command:"):
            return 'red'
        return None

    def format_result(self, text: str) -> str:
        """Color the first line of a result; leave relayed output untouched."""
        color = self.result_color(text)
        if color is None:
            return text
        first, sep, rest = text.partition('\n')
        return self.colorize(first, color) + sep + rest
