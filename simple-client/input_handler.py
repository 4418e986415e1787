"""Input handler for the interactive client.

Collects input with prompt_toolkit, completing slash-command names and,
where the owning plugin offers them, command arguments.
"""

from typing import Callable, Dict, Iterable, List

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.history import InMemoryHistory

from overleaf_sync import CommandCompletion, UserCommand


# Words the client handles itself
BUILTIN_COMMANDS = {
    "help": "Show available commands",
    "quit": "Leave the client",
    "exit": "Leave the client",
}


class SlashCommandCompleter(Completer):
    """Completes '/name' and the arguments of known commands.

    Args:
        commands: Provider of the currently exposed user commands.
        argument_completions: Callable (command, args) -> completions.
    """

    def __init__(
        self,
        commands: Callable[[], Dict[str, UserCommand]],
        argument_completions: Callable[[str, List[str]], List[CommandCompletion]],
    ):
        self._commands = commands
        self._argument_completions = argument_completions

    def get_completions(self, document: Document, complete_event) -> Iterable[Completion]:
        text = document.text_before_cursor

        if ' ' not in text:
            if text.startswith('/'):
                for name, cmd in sorted(self._commands().items()):
                    candidate = f"/{name}"
                    if candidate.startswith(text):
                        yield Completion(candidate, start_position=-len(text), display_meta=cmd.description)
            else:
                for name, description in BUILTIN_COMMANDS.items():
                    if text and name.startswith(text):
                        yield Completion(name, start_position=-len(text), display_meta=description)
            return

        command, _, rest = text.partition(' ')
        command = command.lstrip('/')
        if command not in self._commands():
            return

        args = rest.split(' ')
        current = args[-1]
        for option in self._argument_completions(command, args):
            yield Completion(option.value, start_position=-len(current), display_meta=option.description)


class InputHandler:
    """Prompt with history, auto-suggestion and slash-command completion."""

    def __init__(self, completer: Completer):
        self._session = PromptSession(
            completer=completer,
            history=InMemoryHistory(),
            auto_suggest=AutoSuggestFromHistory(),
            complete_while_typing=True,
        )

    def get_input(self, prompt_str: str) -> str:
        """Get user input.

        Raises:
            EOFError: On end of input (Ctrl+D).
            KeyboardInterrupt: On interrupt (Ctrl+C).
        """
        return self._session.prompt(prompt_str).strip()
