"""Shared fixtures for labctl tests.

Supervisor and installer run against fakes: FakeRunner records commands
instead of executing them, FakeProcessControl keeps a set of "live" PIDs.
Every controller file lives under a per-test home directory.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path
from unittest.mock import patch

import pytest

from labctl.config import LabConfig
from labctl.controller import Controller
from labctl.network import PublicAddresses
from labctl.runner import CommandResult
from labctl.utils.logging import reset_logging

DEFAULT_TOOLS = frozenset({"sudo", "python3", "apt-get", "openssl", "spm_train"})

TOKEN_URL = "http://127.0.0.1:8888/lab?token=0123456789abcdef"


class FakeRunner:
    """CommandRunner that records argv and simulates a few side effects.

    - `python3 -m venv DIR` creates DIR
    - `openssl req ... -keyout KEY -out CERT` writes placeholder files
    - any command containing fail_on exits 1
    """

    def __init__(
        self,
        *,
        tools: frozenset[str] = DEFAULT_TOOLS,
        root: bool = False,
        fail_on: str | None = None,
        call_returncode: int = 0,
    ) -> None:
        self.tools = tools
        self.root = root
        self.fail_on = fail_on
        self.call_returncode = call_returncode
        self.runs: list[tuple[str, ...]] = []
        self.calls: list[tuple[str, ...]] = []

    def run(self, argv: Sequence[str], *, env: Mapping[str, str] | None = None) -> CommandResult:
        argv = tuple(argv)
        self.runs.append(argv)
        if self.fail_on and self.fail_on in " ".join(argv):
            return CommandResult(returncode=1, output="Reading package lists...\nE: simulated failure\n")
        if argv[:3] == ("python3", "-m", "venv"):
            Path(argv[3]).mkdir(parents=True)
        if argv[0] == "openssl":
            Path(argv[argv.index("-keyout") + 1]).write_text("KEY")
            Path(argv[argv.index("-out") + 1]).write_text("CERT")
        return CommandResult(returncode=0, output="ok\n")

    def call(self, argv: Sequence[str]) -> int:
        self.calls.append(tuple(argv))
        return self.call_returncode

    def which(self, name: str) -> str | None:
        return f"/usr/bin/{name}" if name in self.tools else None

    def is_root(self) -> bool:
        return self.root


class FakeProcessControl:
    """ProcessControl over an in-memory set of live PIDs.

    Attributes:
        exit_immediately: Spawned processes are dead by the first liveness check.
        log_line: Text appended to the server log on spawn.
        spawn_error: Raised from spawn_detached when set.
        terminate_error: Raised from terminate when set.
    """

    def __init__(self) -> None:
        self.alive: set[int] = set()
        self.next_pid = 4242
        self.spawned: list[tuple[str, ...]] = []
        self.terminated: list[int] = []
        self.exit_immediately = False
        self.log_line: str | None = f"    {TOKEN_URL}\n"
        self.spawn_error: OSError | None = None
        self.terminate_error: OSError | None = None

    def spawn_detached(
        self,
        argv: Sequence[str],
        *,
        log_path: Path,
        env: Mapping[str, str] | None = None,
    ) -> int:
        if self.spawn_error is not None:
            raise self.spawn_error
        self.spawned.append(tuple(argv))
        pid = self.next_pid
        self.next_pid += 1
        if self.log_line:
            with log_path.open("a", encoding="utf-8") as f:
                f.write(self.log_line)
        if not self.exit_immediately:
            self.alive.add(pid)
        return pid

    def is_alive(self, pid: int) -> bool:
        return pid in self.alive

    def terminate(self, pid: int) -> None:
        if self.terminate_error is not None:
            raise self.terminate_error
        self.alive.discard(pid)
        self.terminated.append(pid)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep tests away from the real home, network and log file."""
    monkeypatch.delenv("LABCTL_HOME", raising=False)
    reset_logging()
    with patch(
        "labctl.cli.actions.lookup_public_addresses",
        return_value=PublicAddresses(ipv4=None, ipv6=None),
    ):
        yield
    reset_logging()


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Per-test controller home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def fake_process() -> FakeProcessControl:
    return FakeProcessControl()


@pytest.fixture
def controller(home: Path, fake_runner: FakeRunner, fake_process: FakeProcessControl) -> Controller:
    """Controller wired to the fakes with no settle delay."""
    return Controller.create(
        home,
        runner=fake_runner,
        process_control=fake_process,
        settle_interval=0,
    )


@pytest.fixture
def installed(controller: Controller) -> LabConfig:
    """Save a config and create its install directory."""
    config = LabConfig(install_path=str(controller.paths.home / "venv"))
    controller.store.save(config)
    config.install_dir.mkdir()
    return config
