"""Fixtures for Overleaf plugin tests.

External scripts are replaced by small Python programs run with the current
interpreter, so tests need neither node nor bash.
"""

import sys

import pytest

from ..plugin import OverleafPlugin
from ..runner import ExecutionResult


class RecordingRunner:
    """Runner stand-in that records invocations instead of spawning."""

    def __init__(self, result=None):
        self.calls = []
        self.result = result or ExecutionResult(success=True)

    def run(self, program, args, working_dir):
        self.calls.append((program, list(args), working_dir))
        return self.result


@pytest.fixture
def extension_dir(tmp_path):
    path = tmp_path / "extension"
    path.mkdir()
    return path


@pytest.fixture
def make_script(extension_dir):
    """Write a fake external script into the extension directory.

    The script records its arguments to argv.txt in its working directory,
    writes the given stdout/stderr and exits with exit_code.
    """
    def _make(relative_path, stdout="", stderr="", exit_code=0):
        path = extension_dir / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            "import sys\n"
            "with open('argv.txt', 'w') as f:\n"
            "    f.write(' '.join(sys.argv[1:]))\n"
            f"sys.stdout.write({stdout!r})\n"
            f"sys.stderr.write({stderr!r})\n"
            f"sys.exit({exit_code})\n",
            encoding="utf-8",
        )
        return path
    return _make


@pytest.fixture
def plugin(tmp_path, extension_dir):
    plugin = OverleafPlugin()
    plugin.initialize({
        "config_dir": str(tmp_path / "config"),
        "extension_dir": str(extension_dir),
        "node_path": sys.executable,
        "shell_path": sys.executable,
    })
    yield plugin
    plugin.shutdown()


@pytest.fixture
def recording_runner(plugin):
    runner = RecordingRunner()
    plugin._runner = runner
    return runner
