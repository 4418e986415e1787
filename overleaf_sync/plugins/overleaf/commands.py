"""Typed Overleaf commands and their parsing from slash-command input."""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Sequence, Union


# Slash-command names carry this prefix (e.g. /overleaf-download)
SLASH_PREFIX = "overleaf-"


class CommandKind(str, Enum):
    """The closed set of Overleaf commands."""
    LOGIN = "login"
    PROJECTS = "projects"
    DOWNLOAD = "download"
    COMPILE = "compile"

    @property
    def slash_name(self) -> str:
        return f"{SLASH_PREFIX}{self.value}"


@dataclass(frozen=True)
class LoginCommand:
    secret: str
    kind: ClassVar[CommandKind] = CommandKind.LOGIN


@dataclass(frozen=True)
class ProjectsCommand:
    kind: ClassVar[CommandKind] = CommandKind.PROJECTS


@dataclass(frozen=True)
class DownloadCommand:
    project_id: str
    kind: ClassVar[CommandKind] = CommandKind.DOWNLOAD


@dataclass(frozen=True)
class CompileCommand:
    project_id: str
    kind: ClassVar[CommandKind] = CommandKind.COMPILE


Command = Union[LoginCommand, ProjectsCommand, DownloadCommand, CompileCommand]


COOKIE_HELP = (
    "❌ Please provide your Overleaf cookie.\n\n"
    "How to get cookie:\n"
    "1. Open https://www.overleaf.com in browser\n"
    "2. Login to your account\n"
    "3. Press F12 → Network tab\n"
    "4. Find Cookie in request headers\n"
    "5. Copy and paste here\n\n"
    f"Usage: /{CommandKind.LOGIN.slash_name} <cookie>"
)

USAGE: Dict[CommandKind, str] = {
    CommandKind.LOGIN: COOKIE_HELP,
    CommandKind.DOWNLOAD: (
        "❌ Please provide project ID.\n\n"
        f"Usage: /{CommandKind.DOWNLOAD.slash_name} <project_id>\n\n"
        f"Get project ID from /{CommandKind.PROJECTS.slash_name}"
    ),
    CommandKind.COMPILE: (
        "❌ Please provide project ID.\n\n"
        f"Usage: /{CommandKind.COMPILE.slash_name} <project_id>"
    ),
}


class UnknownCommandError(ValueError):
    """Raised when a command name is outside the Overleaf command set."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown command: {name}")


class MissingArgumentError(ValueError):
    """Raised when a command's required positional argument is missing."""

    def __init__(self, kind: CommandKind):
        self.kind = kind
        super().__init__(USAGE[kind])

    @property
    def usage(self) -> str:
        return USAGE[self.kind]


def resolve_kind(name: str) -> CommandKind:
    """Map 'download', 'overleaf-download' or '/overleaf-download' to its kind.

    Raises:
        UnknownCommandError: If the name is not an Overleaf command.
    """
    normalized = name.strip().lstrip('/').lower()
    if normalized.startswith(SLASH_PREFIX):
        normalized = normalized[len(SLASH_PREFIX):]
    try:
        return CommandKind(normalized)
    except ValueError:
        raise UnknownCommandError(name) from None


def _first_arg(args: Sequence[str]) -> str:
    return args[0].strip() if args else ""


def parse_command(name: str, args: Sequence[str]) -> Command:
    """Build a typed command from a name and positional arguments.

    The login secret is every argument joined by single spaces, since cookie
    headers ("a=1; b=2") are split by the host on whitespace.

    Raises:
        UnknownCommandError: If the name is not an Overleaf command.
        MissingArgumentError: If the required argument is missing or blank.
    """
    kind = resolve_kind(name)

    if kind is CommandKind.LOGIN:
        secret = " ".join(args).strip()
        if not secret:
            raise MissingArgumentError(kind)
        return LoginCommand(secret=secret)

    if kind is CommandKind.PROJECTS:
        return ProjectsCommand()

    project_id = _first_arg(args)
    if not project_id:
        raise MissingArgumentError(kind)
    if kind is CommandKind.DOWNLOAD:
        return DownloadCommand(project_id=project_id)
    return CompileCommand(project_id=project_id)
