"""Unit tests for the installer.

Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from __future__ import annotations

import stat
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from labctl.config import LabConfig
from labctl.controller import Controller
from labctl.exceptions import StepFailedError, ToolNotFoundError, UninstallIncompleteError
from tests.conftest import FakeProcessControl, FakeRunner


def _config(controller: Controller, name: str = "venv", **kwargs: object) -> LabConfig:
    return LabConfig(install_path=str(controller.paths.home / name), **kwargs)


class TestPlan:
    """Tests for Installer.plan()."""

    def test_default_plan(self, controller: Controller) -> None:
        """Given defaults, plans the five base steps in order."""
        # Act
        steps = controller.installer.plan(_config(controller))

        # Assert
        assert [s.description for s in steps] == [
            "Updating system",
            "Installing system deps",
            "Creating virtual environment",
            "Upgrading pip/wheel",
            "Installing JupyterLab core",
        ]

    def test_optional_steps_are_appended(self, controller: Controller) -> None:
        """Given extension and TLS, adds the LSP step then the certificate step."""
        # Act
        steps = controller.installer.plan(_config(controller, use_tls=True, use_extension=True))

        # Assert
        assert steps[-2].description == "Installing JupyterLab LSP"
        assert steps[-1].description == "Generating self-signed TLS certificate"
        assert steps[-1].argv[0] == "openssl"

    def test_apt_steps_use_sudo_for_normal_user(self, controller: Controller) -> None:
        """Given a non-root user, apt-get runs through sudo."""
        # Act
        steps = controller.installer.plan(_config(controller))

        # Assert
        assert steps[0].argv[:2] == ("sudo", "apt-get")
        assert steps[2].argv[0] == "python3"

    def test_apt_steps_skip_sudo_for_root(self, home: Path, fake_process: FakeProcessControl) -> None:
        """Given root, apt-get runs directly."""
        # Arrange
        controller = Controller.create(home, runner=FakeRunner(root=True), process_control=fake_process)

        # Act
        steps = controller.installer.plan(_config(controller))

        # Assert
        assert steps[0].argv[0] == "apt-get"

    def test_pip_steps_use_venv_python(self, controller: Controller) -> None:
        """Given an install path, pip runs from that virtual environment."""
        # Arrange
        config = _config(controller)

        # Act
        steps = controller.installer.plan(config)

        # Assert
        assert steps[3].argv[:3] == (str(config.install_dir / "bin" / "python"), "-m", "pip")
        assert steps[4].argv[-2:] == ("jupyterlab", "ipykernel")


class TestInstall:
    """Tests for Installer.install()."""

    def test_install_runs_all_steps(self, controller: Controller, fake_runner: FakeRunner) -> None:
        """Given a fresh path, runs every step and creates the venv."""
        # Arrange
        config = _config(controller)

        # Act
        report = controller.installer.install(config)

        # Assert
        assert report.performed is True
        assert len(report.completed_steps) == 5
        assert len(fake_runner.runs) == 5
        assert config.install_dir.is_dir()

    def test_second_install_is_noop(self, controller: Controller, fake_runner: FakeRunner) -> None:
        """Given an existing install directory, runs nothing."""
        # Arrange
        config = _config(controller)
        controller.installer.install(config)
        runs_before = list(fake_runner.runs)

        # Act
        report = controller.installer.install(config)

        # Assert
        assert report.performed is False
        assert fake_runner.runs == runs_before

    def test_progress_callback_sees_each_step(self, controller: Controller) -> None:
        """Given on_step, reports running then done for each step."""
        # Arrange
        events: list[tuple[str, str]] = []

        # Act
        controller.installer.install(_config(controller), on_step=lambda d, s: events.append((d, s)))

        # Assert
        assert events[:2] == [("Updating system", "running"), ("Updating system", "done")]
        assert len(events) == 10

    def test_failed_step_stops_install(self, home: Path, fake_process: FakeProcessControl) -> None:
        """Given a failing step, raises StepFailedError and skips later steps."""
        # Arrange
        runner = FakeRunner(fail_on="jupyterlab")
        controller = Controller.create(home, runner=runner, process_control=fake_process)
        events: list[tuple[str, str]] = []

        # Act
        with pytest.raises(StepFailedError) as exc_info:
            controller.installer.install(
                _config(controller, use_tls=True),
                on_step=lambda d, s: events.append((d, s)),
            )

        # Assert
        assert exc_info.value.step == "Installing JupyterLab core"
        assert exc_info.value.returncode == 1
        assert "simulated failure" in exc_info.value.output
        assert events[-1] == ("Installing JupyterLab core", "failed")
        assert not any(argv[0] == "openssl" for argv in runner.runs)

    def test_missing_tool_changes_nothing(self, home: Path, fake_process: FakeProcessControl) -> None:
        """Given openssl is missing and TLS requested, raises before any step runs."""
        # Arrange
        runner = FakeRunner(tools=frozenset({"sudo", "python3", "apt-get"}))
        controller = Controller.create(home, runner=runner, process_control=fake_process)

        # Act
        with pytest.raises(ToolNotFoundError) as exc_info:
            controller.installer.install(_config(controller, use_tls=True))

        # Assert
        assert exc_info.value.tool == "openssl"
        assert runner.runs == []

    def test_root_does_not_need_sudo(self, home: Path, fake_process: FakeProcessControl) -> None:
        """Given root without sudo installed, the prerequisite check passes."""
        # Arrange
        runner = FakeRunner(tools=frozenset({"python3", "apt-get"}), root=True)
        controller = Controller.create(home, runner=runner, process_control=fake_process)

        # Act
        report = controller.installer.install(_config(controller))

        # Assert
        assert report.performed is True


class TestTLSToggle:
    """Tests for certificate handling across installs."""

    def test_tls_install_creates_owner_only_key(self, controller: Controller) -> None:
        """Given TLS, generates cert and key (key mode 0600)."""
        # Act
        controller.installer.install(_config(controller, use_tls=True))

        # Assert
        assert controller.paths.cert_file.exists()
        assert controller.paths.key_file.exists()
        if sys.platform != "win32":
            assert stat.S_IMODE(controller.paths.key_file.stat().st_mode) == 0o600

    def test_tls_on_then_off_removes_pair(self, controller: Controller) -> None:
        """Given a TLS install followed by a non-TLS install, no cert or key remains."""
        # Arrange
        controller.installer.install(_config(controller, "first", use_tls=True))

        # Act
        report = controller.installer.install(_config(controller, "second", use_tls=False))

        # Assert
        assert report.performed is True
        assert not controller.paths.cert_file.exists()
        assert not controller.paths.key_file.exists()
        assert set(report.removed_tls) == {controller.paths.cert_file, controller.paths.key_file}

    def test_tls_reinstall_replaces_old_pair(self, controller: Controller, fake_runner: FakeRunner) -> None:
        """Given an old pair on disk, the certificate step regenerates it."""
        # Arrange
        controller.paths.cert_file.write_text("OLD")
        controller.paths.key_file.write_text("OLD")

        # Act
        controller.installer.install(_config(controller, use_tls=True))

        # Assert
        assert controller.paths.cert_file.read_text() == "CERT"
        assert controller.paths.key_file.read_text() == "KEY"


class TestUninstall:
    """Tests for Installer.uninstall()."""

    def test_uninstall_not_installed_is_noop(self, controller: Controller) -> None:
        """Given no install directory, returns False."""
        # Act / Assert
        assert controller.installer.uninstall(_config(controller)) is False

    def test_uninstall_removes_everything_but_config(
        self, controller: Controller, fake_process: FakeProcessControl
    ) -> None:
        """Given a running TLS install, stops it and removes all controller files."""
        # Arrange
        config = _config(controller, use_tls=True)
        controller.store.save(config)
        controller.installer.install(config)
        handle = controller.supervisor.start(config)

        # Act
        removed = controller.installer.uninstall(config)

        # Assert
        assert removed is True
        assert fake_process.terminated == [handle.pid]
        assert not config.install_dir.exists()
        assert not controller.paths.cert_file.exists()
        assert not controller.paths.key_file.exists()
        assert not controller.paths.log_file.exists()
        assert not controller.paths.pid_file.exists()
        assert controller.paths.config_file.exists()

    def test_uninstall_stopped_server(self, controller: Controller, installed: LabConfig) -> None:
        """Given a stopped server, removes the install without signalling."""
        # Act
        removed = controller.installer.uninstall(installed)

        # Assert
        assert removed is True
        assert not installed.install_dir.exists()

    def test_failed_removal_does_not_stop_the_rest(
        self, controller: Controller, fake_process: FakeProcessControl
    ) -> None:
        """Given the install directory cannot be removed, still removes the other files."""
        # Arrange
        config = _config(controller, use_tls=True)
        controller.installer.install(config)
        controller.supervisor.start(config)

        # Act
        with patch("labctl.utils.file_helpers.shutil.rmtree", side_effect=PermissionError("denied")):
            with pytest.raises(UninstallIncompleteError) as exc_info:
                controller.installer.uninstall(config)

        # Assert
        assert [path for path, _ in exc_info.value.failures] == [config.install_dir]
        assert config.install_dir.exists()
        assert not controller.paths.cert_file.exists()
        assert not controller.paths.key_file.exists()
        assert not controller.paths.log_file.exists()
        assert not controller.paths.pid_file.exists()
