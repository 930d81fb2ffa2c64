"""Platform installers that replace the running tool with a downloaded build.

Exactly two implementations exist: a POSIX one that runs the install command
synchronously and a Windows one that hands off to a detached batch script,
since Windows cannot overwrite a jar that is still executing.
"""
from __future__ import annotations

import abc
import logging
import os
import subprocess
import sys
import tempfile
import textwrap
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from cli_config import UpdateSettings
from common.errors import InstallFailure
from common.logging_utils import extra_context, is_debug_enabled, safe_url

logger = logging.getLogger(__name__)

Emitter = Callable[[str], None]

_INSTALL_BAT_TEMPLATE = textwrap.dedent("""\
    @echo off
    rem Wait for the calling blade process to exit before replacing it.
    ping -n 3 127.0.0.1 > nul
    call jpm install -f "{download_url}"
    if errorlevel 1 (
        echo blade update failed with code %errorlevel%
        pause
        exit /b %errorlevel%
    )
    echo Update completed successfully.
    """)


def run_process(cmd: Sequence[str], cwd: Optional[str]) -> int:
    """Run ``cmd`` synchronously in ``cwd`` and return its exit code."""
    result = subprocess.run(list(cmd), cwd=cwd, check=False)  # noqa: S603
    return result.returncode


def _print(message: str) -> None:
    print(message)


def _print_error(message: str) -> None:
    sys.stderr.write(message + "\n")


@dataclass(frozen=True)
class InstallResult:
    """Outcome of one install attempt."""
    success: bool
    message: str
    exit_code: Optional[int] = None
    detached: bool = False


class UpdateExecutor(abc.ABC):
    """Installs a downloaded build. Implementations never retry."""

    def __init__(self, settings: UpdateSettings, emit: Emitter = _print, emit_error: Emitter = _print_error):
        self.settings = settings
        self.emit = emit
        self.emit_error = emit_error

    @abc.abstractmethod
    def apply(self, download_url: str) -> InstallResult:
        """Install the artifact at ``download_url``."""


class PosixExecutor(UpdateExecutor):
    """Runs the install command in the foreground and reports its exit code."""

    def __init__(self, settings: UpdateSettings, run: Callable[..., int] = run_process, **kwargs):
        super().__init__(settings, **kwargs)
        self._run = run

    def command(self, download_url: str) -> List[str]:
        return list(self.settings.install_command) + [download_url]

    def _install(self, download_url: str) -> int:
        cmd = self.command(download_url)
        logger.info("Running: %s", " ".join(cmd))
        try:
            code = self._run(cmd, self.settings.base_dir)
        except (OSError, subprocess.SubprocessError) as exc:
            raise InstallFailure(f"Problem running {cmd[0]} install.", details=str(exc)) from exc
        if code != 0:
            raise InstallFailure(f"blade exited with code: {code}", exit_code=code)
        return code

    def apply(self, download_url: str) -> InstallResult:
        try:
            code = self._install(download_url)
        except InstallFailure as exc:
            self.emit_error(exc.message)
            if exc.details:
                self.emit_error(exc.details)
            return InstallResult(False, str(exc), exit_code=exc.exit_code)
        message = "Update completed successfully."
        self.emit(message)
        return InstallResult(True, message, exit_code=code)


class WindowsExecutor(UpdateExecutor):
    """Writes the installer script to a temp file and starts it detached."""

    def __init__(
        self,
        settings: UpdateSettings,
        spawn: Callable[..., object] = subprocess.Popen,
        template: str = _INSTALL_BAT_TEMPLATE,
        **kwargs,
    ):
        super().__init__(settings, **kwargs)
        self._spawn = spawn
        self.template = template

    def write_script(self, download_url: str) -> str:
        """Render the installer script and return its path."""
        content = self.template.format(download_url=download_url)
        fd, path = tempfile.mkstemp(suffix=".bat", prefix="jpm_install")
        with os.fdopen(fd, "w", encoding="utf-8", newline="\r\n") as f:
            f.write(content)
        return path

    def apply(self, download_url: str) -> InstallResult:
        path = None
        try:
            path = self.write_script(download_url)
            flags = getattr(subprocess, "DETACHED_PROCESS", 0x00000008) | getattr(
                subprocess, "CREATE_NEW_PROCESS_GROUP", 0x00000200
            )
            self._spawn(
                ["cmd", "/c", "start", "", path],
                cwd=self.settings.base_dir,
                creationflags=flags,
                close_fds=True,
            )
        except (OSError, ValueError) as exc:
            if path and os.path.exists(path):
                os.unlink(path)
            failure = InstallFailure("Problem starting the blade installer.", details=str(exc))
            self.emit_error(failure.message)
            self.emit_error(str(exc))
            return InstallResult(False, str(failure))
        if is_debug_enabled(logger):
            logger.debug(
                "Installer launched",
                extra=extra_context(
                    event="spawn",
                    component="executor",
                    action="apply",
                    target=safe_url(download_url),
                    script=path
                )
            )
        message = "The blade installer was started in a new window and will finish after blade exits."
        self.emit(message)
        return InstallResult(True, message, detached=True)


def is_windows(platform_name: Optional[str] = None) -> bool:
    name = platform_name if platform_name is not None else sys.platform
    return name.startswith("win")


def select_executor(
    settings: UpdateSettings,
    platform_name: Optional[str] = None,
    **kwargs,
) -> UpdateExecutor:
    """Return the executor matching the host operating system family."""
    if is_windows(platform_name):
        return WindowsExecutor(settings, **kwargs)
    return PosixExecutor(settings, **kwargs)
