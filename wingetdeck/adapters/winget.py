"""
Package manager adapter — the single subprocess seam.

This is the ONLY place where ``subprocess.run`` is called for the
external package manager. Argument construction for every command
the control plane issues lives here too, so the exact flags sent to
the tool can be audited in one file.

The runner does not classify outcomes. Spawn errors (``OSError``)
and timeouts propagate to the calling component, which owns the
decision of what they mean.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_EXECUTABLE = "winget"

# Flags accepting source and package agreements up front; without
# them the tool blocks on an interactive prompt.
_SOURCE_AGREEMENTS = "--accept-source-agreements"
_PACKAGE_AGREEMENTS = "--accept-package-agreements"


class CommandResult(BaseModel):
    """Captured result of one package manager invocation."""

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout and stderr together, for text matching."""
        return f"{self.stdout}\n{self.stderr}"


class WingetRunner:
    """Run package manager commands and capture their output.

    Args:
        executable: Name or path of the package manager binary.
        timeout: Default timeout in seconds for listing commands.
        install_timeout: Timeout for install/upgrade (None = wait forever).
    """

    def __init__(
        self,
        executable: str = DEFAULT_EXECUTABLE,
        timeout: float | None = 120,
        install_timeout: float | None = None,
    ) -> None:
        self.executable = executable
        self.timeout = timeout
        self.install_timeout = install_timeout

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} executable={self.executable!r}>"

    def is_available(self) -> bool:
        """Whether the executable can be found on PATH."""
        return shutil.which(self.executable) is not None

    # ── Argument builders ───────────────────────────────────────

    def list_args(self, json_output: bool = True) -> list[str]:
        args = ["list", _SOURCE_AGREEMENTS]
        if json_output:
            args += ["--output", "json"]
        return args

    def exact_list_args(self, package_id: str) -> list[str]:
        return ["list", "--id", package_id, "--exact"]

    def install_args(self, package_id: str, disable_interactivity: bool = True) -> list[str]:
        args = [
            "install",
            "--id", package_id,
            "--exact",
            _PACKAGE_AGREEMENTS,
            _SOURCE_AGREEMENTS,
            "--silent",
        ]
        if disable_interactivity:
            args.append("--disable-interactivity")
        return args

    def upgrade_all_args(self) -> list[str]:
        return ["upgrade", "--all", _PACKAGE_AGREEMENTS, _SOURCE_AGREEMENTS]

    # ── Execution ───────────────────────────────────────────────

    def run(self, args: list[str]) -> CommandResult:
        """Invoke a read-only command under the listing timeout.

        Raises:
            OSError: The executable could not be started.
            subprocess.TimeoutExpired: The command exceeded the timeout.
        """
        return self._execute(args, self.timeout)

    def run_install(self, args: list[str]) -> CommandResult:
        """Invoke a side-effecting command under the install timeout."""
        return self._execute(args, self.install_timeout)

    def _execute(self, args: list[str], timeout: float | None) -> CommandResult:
        cmd = [self.executable, *args]

        logger.debug("Executing: %s (timeout=%s)", " ".join(cmd), timeout)
        start = time.monotonic()

        # Pipes are owned and closed by subprocess.run on every exit path
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug("%s %s exited %d in %dms", self.executable, args[0] if args else "",
                     result.returncode, elapsed_ms)

        return CommandResult(
            args=cmd,
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            elapsed_ms=elapsed_ms,
        )
