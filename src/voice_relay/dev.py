"""Development runner: the API and the Streamlit client in one terminal."""
from __future__ import annotations

import contextlib
import logging
import os
import pathlib
import signal
import subprocess
import sys
import time
from dataclasses import dataclass, field
from typing import Optional

from voice_relay.consts import DEFAULT_UI_PORT
from voice_relay.settings import Settings, settings

logger = logging.getLogger("voice_relay.dev")

UI_SCRIPT = pathlib.Path(__file__).resolve().parent / "ui" / "streamlit_app.py"
API_URL_ENV = "VOICE_RELAY_API_URL"


def api_command(cfg: Settings) -> list[str]:
    cmd = [
        sys.executable, "-m", "uvicorn", "voice_relay.app:create_app", "--factory",
        "--host", cfg.HOST,
        "--port", str(cfg.PORT),
        "--log-level", cfg.LOG_LEVEL.lower(),
    ]
    if cfg.RELOAD:
        cmd += ["--reload", "--reload-dir", str(UI_SCRIPT.parent.parent)]
    return cmd


def ui_command(port: int = DEFAULT_UI_PORT) -> list[str]:
    # no file watcher: reruns are triggered by the user, not by saves
    return [
        sys.executable, "-m", "streamlit", "run", str(UI_SCRIPT),
        "--server.port", str(port),
        "--server.address", "localhost",
        "--server.fileWatcherType", "none",
        "--server.runOnSave", "false",
    ]


def client_env(cfg: Settings) -> dict[str, str]:
    """Environment for the children; the UI talks to the local API unless told otherwise."""
    env = dict(os.environ)
    env.setdefault(API_URL_ENV, f"http://localhost:{cfg.PORT}")
    return env


@dataclass
class Service:
    name: str
    cmd: list[str]
    url: str
    proc: Optional[subprocess.Popen] = field(default=None, repr=False)

    def start(self, env: dict[str, str]) -> None:
        logger.info("Starting %s on %s", self.name, self.url)
        # own process group so reloaders and watchers go down with it
        self.proc = subprocess.Popen(self.cmd, env=env, start_new_session=True)

    def exit_code(self) -> Optional[int]:
        return None if self.proc is None else self.proc.poll()

    def stop(self, grace_s: float = 5.0) -> None:
        if self.proc is None or self.proc.poll() is not None:
            return
        self._signal(signal.SIGTERM)
        try:
            self.proc.wait(timeout=grace_s)
        except subprocess.TimeoutExpired:
            logger.warning("%s ignored SIGTERM, killing", self.name)
            self._signal(signal.SIGKILL)

    def _signal(self, sig: int) -> None:
        with contextlib.suppress(ProcessLookupError):
            try:
                os.killpg(self.proc.pid, sig)
            except PermissionError:
                self.proc.send_signal(sig)


def build_services(cfg: Settings, ui_port: int = DEFAULT_UI_PORT) -> list[Service]:
    return [
        Service("API", api_command(cfg), f"http://{cfg.HOST}:{cfg.PORT}"),
        Service("UI", ui_command(ui_port), f"http://localhost:{ui_port}"),
    ]


def supervise(services: list[Service], poll_s: float = 0.3) -> None:
    """Block until any service exits; raise SystemExit naming it."""
    while True:
        for svc in services:
            rc = svc.exit_code()
            if rc is not None:
                raise SystemExit(f"{svc.name} exited with code {rc}")
        time.sleep(poll_s)


def main() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL, format="[voice_relay] %(message)s")

    services = build_services(settings)
    env = client_env(settings)
    try:
        for svc in services:
            svc.start(env)
        supervise(services)
    except KeyboardInterrupt:
        logger.info("Ctrl+C received, shutting down...")
    finally:
        for svc in reversed(services):
            svc.stop()


if __name__ == "__main__":
    main()
