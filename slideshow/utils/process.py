"""Subprocess execution utilities.

Provides a reusable runner for external processes with:
- Streaming output capture (stdout and stderr merged)
- Wall-clock timeout enforced by a watchdog, even when the child is silent
- Consistent result reporting
"""

import logging
import subprocess
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Result of a subprocess execution.

    Compatible with subprocess.CompletedProcess interface.
    """

    returncode: int
    stdout: str
    stderr: str = ""
    cmd: list[str] = field(default_factory=list)

    def tail(self, max_chars: int = 4000) -> str:
        """Last ``max_chars`` characters of captured output."""
        text = self.stdout.strip()
        if len(text) <= max_chars:
            return text
        return "..." + text[-max_chars:]


class ProcessRunner:
    """Runs external processes with streaming output capture."""

    def __init__(self, log_command: bool = True):
        """Initialize process runner.

        Args:
            log_command: Whether to log the command before running
        """
        self.log_command = log_command

    def run(
        self,
        cmd: list[str],
        description: str = "",
        cwd: Optional[Path] = None,
        env: Optional[dict] = None,
        timeout: Optional[float] = None,
        line_callback: Optional[Callable[[str], None]] = None,
    ) -> ProcessResult:
        """Run a command and wait for it to exit.

        Args:
            cmd: Command and arguments as list
            description: Human-readable description for logging
            cwd: Working directory
            env: Environment variables (None = inherit)
            timeout: Wall-clock limit in seconds (None = no timeout)
            line_callback: Optional callback for each output line

        Returns:
            ProcessResult with captured output, whatever the exit code

        Raises:
            OSError: If the process cannot be spawned
            subprocess.TimeoutExpired: If the timeout elapsed; the child is
                killed and its partial output is attached
        """
        if description:
            logger.info("→ %s", description)
        if self.log_command:
            logger.debug("$ %s", " ".join(cmd))

        process = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
            bufsize=1,
            cwd=cwd,
            env=env,
        )

        timed_out = threading.Event()

        def _kill_on_timeout():
            timed_out.set()
            process.kill()

        watchdog = None
        if timeout:
            watchdog = threading.Timer(timeout, _kill_on_timeout)
            watchdog.daemon = True
            watchdog.start()

        stdout_lines = []
        try:
            for line in iter(process.stdout.readline, ''):
                stdout_lines.append(line)
                if line_callback:
                    line_callback(line)
            process.wait()
        finally:
            if watchdog:
                watchdog.cancel()
            process.stdout.close()

        stdout = ''.join(stdout_lines)

        if timed_out.is_set():
            raise subprocess.TimeoutExpired(cmd, timeout, output=stdout)

        return ProcessResult(
            returncode=process.returncode,
            stdout=stdout,
            stderr="",
            cmd=cmd,
        )
