"""Wiring for controller operations.

Bundles the config store, supervisor and installer around one set of
ControllerPaths and one pair of OS capabilities, so the CLI builds
everything in one place and tests can swap in fakes.
"""

from __future__ import annotations

__all__ = ["Controller"]

from dataclasses import dataclass
from pathlib import Path

from labctl.config import ConfigStore, ControllerPaths, LabConfig
from labctl.constants import SETTLE_INTERVAL_SECONDS
from labctl.installer import Installer
from labctl.runner import CommandRunner, OSProcessControl, ProcessControl, SubprocessRunner
from labctl.supervisor import ProcessSupervisor


@dataclass(slots=True)
class Controller:
    """Everything an operation needs.

    Attributes:
        paths: Controller file locations.
        store: Config persistence.
        supervisor: Server process control.
        installer: Install / uninstall.
    """

    paths: ControllerPaths
    store: ConfigStore
    supervisor: ProcessSupervisor
    installer: Installer

    @classmethod
    def create(
        cls,
        home: Path | None = None,
        *,
        runner: CommandRunner | None = None,
        process_control: ProcessControl | None = None,
        settle_interval: float = SETTLE_INTERVAL_SECONDS,
    ) -> Controller:
        """Build a controller for the given home directory.

        Args:
            home: Base directory (LABCTL_HOME or the user's home if None).
            runner: Command capability (subprocess by default).
            process_control: Process capability (OS by default).
            settle_interval: Override the post-launch settle pause.
        """
        paths = ControllerPaths.from_home(home)
        runner = runner or SubprocessRunner()
        supervisor = ProcessSupervisor(
            paths,
            process_control=process_control or OSProcessControl(),
            runner=runner,
            settle_interval=settle_interval,
        )
        return cls(
            paths=paths,
            store=ConfigStore(paths.config_file, home=paths.home),
            supervisor=supervisor,
            installer=Installer(paths, supervisor, runner=runner),
        )

    def load_config(self) -> LabConfig:
        """Reload settings from disk (called at the start of every operation)."""
        return self.store.load()
