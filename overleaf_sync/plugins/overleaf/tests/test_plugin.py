"""Tests for the Overleaf plugin and its command dispatch."""

import json
import sys

import pytest

from ...base import CommandPlugin, ServerCommand, UnknownContextServerError
from ..commands import USAGE, CommandKind
from ..plugin import OverleafPlugin, create_plugin
from ..runner import ExecutionResult


class TestOverleafPluginInitialization:

    def test_create_plugin_factory(self):
        plugin = create_plugin()
        assert isinstance(plugin, OverleafPlugin)
        assert isinstance(plugin, CommandPlugin)

    def test_plugin_name(self):
        assert OverleafPlugin().name == "overleaf"

    def test_initialize_applies_overrides(self, tmp_path):
        plugin = OverleafPlugin()
        plugin.initialize({"config_dir": str(tmp_path / "cfg"), "timeout": 5})

        assert plugin._initialized is True
        assert plugin.config.config_dir == tmp_path / "cfg"
        assert plugin.config.timeout == 5

    def test_initialize_reads_config_path(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"serverUrl": "https://overleaf.example.org"}), encoding="utf-8")

        plugin = OverleafPlugin()
        plugin.initialize({"config_path": str(path), "config_dir": str(tmp_path)})
        plugin.login("abc")

        data = json.loads((tmp_path / "credentials.json").read_text(encoding="utf-8"))
        assert data["serverUrl"] == "https://overleaf.example.org"

    def test_shutdown(self, plugin):
        plugin.shutdown()

        assert plugin._initialized is False
        assert plugin._runner is None


class TestLazyInitialization:

    @pytest.fixture
    def home_config(self, isolated_home):
        def _write(data):
            config_dir = isolated_home / ".overleaf-zed"
            config_dir.mkdir()
            (config_dir / "config.json").write_text(json.dumps(data), encoding="utf-8")
        return _write

    def test_invalid_config_is_reported_as_text(self, home_config):
        home_config({"timeout": -1})

        text = OverleafPlugin().dispatch("projects", [])

        assert text.startswith("❌ Invalid configuration.")
        assert "timeout" in text

    def test_invalid_server_url_blocks_login(self, home_config, isolated_home):
        home_config({"serverUrl": "ftp://x"})

        text = OverleafPlugin().dispatch("login", ["abc"])

        assert text.startswith("❌ Invalid configuration.")
        assert not (isolated_home / ".overleaf-zed" / "credentials.json").exists()

    def test_valid_config_initializes_on_first_use(self, isolated_home):
        plugin = OverleafPlugin()

        assert "Cookie saved" in plugin.dispatch("login", ["abc"])
        assert plugin._initialized is True
        assert (isolated_home / ".overleaf-zed" / "credentials.json").exists()


class TestUserCommands:

    def test_declares_four_slash_commands(self, plugin):
        names = [cmd.name for cmd in plugin.get_user_commands()]
        assert names == ["overleaf-login", "overleaf-projects", "overleaf-download", "overleaf-compile"]

    def test_executors_match_commands(self, plugin):
        executors = plugin.get_executors()
        assert set(executors) == {cmd.name for cmd in plugin.get_user_commands()}

    def test_executor_dispatches(self, plugin, recording_runner):
        text = plugin.get_executors()["overleaf-download"](["p1"])

        assert "Project downloaded" in text
        assert recording_runner.calls[0][1] == ["download-projects.js", "p1"]


class TestLogin:

    def test_saves_cookie(self, plugin):
        text = plugin.dispatch("login", ["abc123"])

        assert "saved" in text
        content = plugin.config.credentials_path.read_text(encoding="utf-8")
        assert '"cookie": "abc123"' in content

    @pytest.mark.parametrize("args", [[], [""]])
    def test_empty_secret_gives_guidance_without_writing(self, plugin, args):
        text = plugin.dispatch("login", args)

        assert text == USAGE[CommandKind.LOGIN]
        assert not plugin.config.config_dir.exists()

    def test_cookie_with_spaces(self, plugin):
        plugin.dispatch("overleaf-login", ["overleaf_session2=abc;", "GCLB=def"])

        data = json.loads(plugin.config.credentials_path.read_text(encoding="utf-8"))
        assert data["cookie"] == "overleaf_session2=abc; GCLB=def"

    def test_write_failure_is_reported(self, plugin, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        plugin.initialize({"config_dir": str(blocker / "config")})

        text = plugin.login("abc123")

        assert text.startswith("❌ Failed to save cookie.")
        assert "Cookie saved" not in text

    def test_lists_next_commands(self, plugin):
        text = plugin.login("abc123")
        assert "/overleaf-projects" in text
        assert "/overleaf-download <project_id>" in text


class TestProjects:

    def test_relays_stdout_verbatim(self, plugin, make_script):
        make_script("scripts/list-projects.js", stdout="Project A\nProject B")

        assert plugin.dispatch("projects", []) == "Project A\nProject B"

    def test_failure_relays_stderr(self, plugin, make_script):
        make_script("scripts/list-projects.js", stderr="Error: no credentials", exit_code=1)

        text = plugin.dispatch("projects", [])

        assert text.startswith("❌ Failed to list projects.")
        assert "no credentials" in text

    def test_spawn_failure(self, plugin):
        plugin.initialize({"node_path": "nonexistent_node_xyz"})

        text = plugin.list_projects()

        assert text.startswith("❌ Failed to execute command:")
        assert "nonexistent_node_xyz" in text

    def test_runs_in_extension_dir(self, plugin, make_script, extension_dir):
        make_script("scripts/list-projects.js")

        plugin.list_projects()

        assert (extension_dir / "argv.txt").exists()


class TestDownload:

    def test_missing_project_id_spawns_nothing(self, plugin, recording_runner):
        text = plugin.dispatch("download", [""])

        assert text == USAGE[CommandKind.DOWNLOAD]
        assert recording_runner.calls == []

    def test_success_reports_location(self, plugin, make_script, extension_dir):
        make_script("download-projects.js")

        text = plugin.dispatch("download", ["p1"])

        assert text.startswith("✅ Project downloaded!")
        assert f"Location: {plugin.config.resolved_projects_dir / 'p1'}" in text
        assert (extension_dir / "argv.txt").read_text(encoding="utf-8") == "p1"

    def test_failure_relays_stderr(self, plugin, recording_runner):
        recording_runner.result = ExecutionResult(success=False, stderr="404 Not Found", returncode=1)

        text = plugin.download_project("p1")

        assert text == "❌ Failed to download project.\n\nError: 404 Not Found"


class TestCompile:

    def test_missing_project_id_spawns_nothing(self, plugin, recording_runner):
        text = plugin.dispatch("compile", [])

        assert text == USAGE[CommandKind.COMPILE]
        assert recording_runner.calls == []

    def test_success_reports_pdf(self, plugin, make_script, extension_dir):
        make_script("compile.sh")

        text = plugin.dispatch("compile", ["p1"])

        assert text.startswith("✅ Compilation complete!")
        assert str(plugin.config.resolved_projects_dir / "p1" / "output.pdf") in text
        assert (extension_dir / "argv.txt").read_text(encoding="utf-8") == "p1"

    def test_failure_contains_stderr(self, plugin, make_script):
        make_script("compile.sh", stderr="missing .tex file", exit_code=1)

        text = plugin.dispatch("compile", ["p1"])

        assert text.startswith("❌ Compilation failed.")
        assert "missing .tex file" in text

    def test_uses_shell_interpreter(self, plugin, recording_runner):
        plugin.compile_project("p1")

        program, args, working_dir = recording_runner.calls[0]
        assert program == sys.executable
        assert args == ["compile.sh", "p1"]
        assert working_dir == str(plugin.config.extension_dir)


class TestUnknownCommand:

    @pytest.mark.parametrize("name", ["sync", "overleaf-watch", "Login!", ""])
    def test_returns_name_unchanged(self, plugin, recording_runner, name):
        text = plugin.dispatch(name, ["x"])

        assert text == f"Unknown command: {name}"
        assert recording_runner.calls == []


class TestCompletions:

    def test_offers_downloaded_projects_for_compile(self, plugin):
        projects_dir = plugin.config.resolved_projects_dir
        for name in ("thesis", "paper", "talk"):
            (projects_dir / name).mkdir(parents=True)

        values = [c.value for c in plugin.get_command_completions("overleaf-compile", ["t"])]

        assert values == ["talk", "thesis"]

    def test_no_completions_for_other_commands(self, plugin):
        assert plugin.get_command_completions("overleaf-login", []) == []

    def test_no_projects_dir(self, plugin):
        assert plugin.get_command_completions("overleaf-compile", []) == []


class TestContextServer:

    def test_overleaf_server_command(self, plugin):
        command = plugin.context_server_command("overleaf")

        assert command == ServerCommand(
            command=sys.executable,
            args=[str(plugin.config.extension_dir / "server/index.js")],
        )

    def test_unknown_server_raises(self, plugin):
        with pytest.raises(UnknownContextServerError) as exc_info:
            plugin.context_server_command("github")

        assert exc_info.value.server_id == "github"
