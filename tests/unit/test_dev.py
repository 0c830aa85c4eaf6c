"""Tests for the development runner."""
import signal
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from voice_relay import dev


class TestCommands:
    def test_api_command_uses_factory_and_settings(self, make_settings):
        cmd = dev.api_command(make_settings(HOST="127.0.0.1", PORT=9000, LOG_LEVEL="DEBUG"))

        assert cmd[1:5] == ["-m", "uvicorn", "voice_relay.app:create_app", "--factory"]
        assert cmd[cmd.index("--host") + 1] == "127.0.0.1"
        assert cmd[cmd.index("--port") + 1] == "9000"
        assert cmd[cmd.index("--log-level") + 1] == "debug"
        assert "--reload" not in cmd

    def test_reload_is_scoped_to_the_package(self, make_settings):
        cmd = dev.api_command(make_settings(RELOAD=True))

        assert "--reload" in cmd
        assert cmd[cmd.index("--reload-dir") + 1].endswith("voice_relay")

    def test_ui_command_points_at_the_streamlit_page(self):
        cmd = dev.ui_command(8600)

        assert dev.UI_SCRIPT.exists()
        assert cmd[cmd.index("run") + 1] == str(dev.UI_SCRIPT)
        assert cmd[cmd.index("--server.port") + 1] == "8600"

    def test_client_env_defaults_api_url(self, make_settings, monkeypatch):
        monkeypatch.delenv(dev.API_URL_ENV, raising=False)
        assert dev.client_env(make_settings(PORT=9000))[dev.API_URL_ENV] == "http://localhost:9000"

        monkeypatch.setenv(dev.API_URL_ENV, "http://relay.lan:8000")
        assert dev.client_env(make_settings())[dev.API_URL_ENV] == "http://relay.lan:8000"


def _service(poll_result=None) -> dev.Service:
    svc = dev.Service("API", ["true"], "http://localhost:8000")
    svc.proc = MagicMock(spec=subprocess.Popen)
    svc.proc.pid = 4242
    svc.proc.poll.return_value = poll_result
    return svc


class TestService:
    def test_stop_is_a_noop_when_already_exited(self):
        svc = _service(poll_result=0)

        with patch("voice_relay.dev.os.killpg") as killpg:
            svc.stop()

        killpg.assert_not_called()

    def test_stop_terminates_the_process_group(self):
        svc = _service()

        with patch("voice_relay.dev.os.killpg") as killpg:
            svc.stop()

        killpg.assert_called_once_with(4242, signal.SIGTERM)

    def test_stop_escalates_to_sigkill(self):
        svc = _service()
        svc.proc.wait.side_effect = subprocess.TimeoutExpired(cmd="uvicorn", timeout=5)

        with patch("voice_relay.dev.os.killpg") as killpg:
            svc.stop()

        assert [c.args for c in killpg.call_args_list] == [(4242, signal.SIGTERM), (4242, signal.SIGKILL)]

    def test_vanished_group_is_ignored(self):
        svc = _service()

        with patch("voice_relay.dev.os.killpg", side_effect=ProcessLookupError):
            svc.stop()

    def test_supervise_reports_the_first_exit(self):
        services = [_service(), _service(poll_result=3)]
        services[1].name = "UI"

        with pytest.raises(SystemExit, match="UI exited with code 3"):
            dev.supervise(services, poll_s=0)

    def test_build_services(self, make_settings):
        api, ui = dev.build_services(make_settings(HOST="127.0.0.1", PORT=9000), ui_port=8600)

        assert (api.name, api.url) == ("API", "http://127.0.0.1:9000")
        assert (ui.name, ui.url) == ("UI", "http://localhost:8600")
        assert api.proc is None and ui.proc is None
