"""
Running VCS command-line tools.

Every call starts one short-lived child process, reads its output and waits
at most ``timeout`` seconds before killing it. Failures never raise: the
caller gets whatever output was produced, possibly nothing.
"""

import os
import signal
import subprocess
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .logging_config import RevisionLogger

DEFAULT_COMMAND_TIMEOUT = 1.0

# Seconds to wait for the pipes to close after the process was killed
KILL_GRACE_PERIOD = 1.0


@dataclass
class CommandResult:
    """Output of one command invocation."""

    returncode: Optional[int]
    lines: List[str] = field(default_factory=list)
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    @property
    def first_line(self) -> Optional[str]:
        return self.lines[0] if self.lines else None


def _as_text(output) -> str:
    if output is None:
        return ''
    if isinstance(output, bytes):
        return output.decode('utf-8', errors='replace')
    return output


def kill_process_tree(proc: subprocess.Popen) -> None:
    """
    Kill a process and everything it started.

    On POSIX the process leads its own session, so the whole group is killed.
    Windows only gets the process itself.
    """
    if os.name != 'nt':
        try:
            os.killpg(proc.pid, signal.SIGKILL)
            return
        except OSError:
            # Group already gone; fall back to the process itself
            pass
    proc.kill()


def run_command(args: Sequence[str], cwd: str, log: RevisionLogger,
                timeout: float = DEFAULT_COMMAND_TIMEOUT) -> CommandResult:
    """
    Run a command and collect its standard output line by line.

    stdout and stderr are drained concurrently by ``communicate`` so a chatty
    tool cannot block on a full pipe. When the timeout expires the process
    tree is killed and the output read so far is still returned. If a
    descendant keeps the pipes open even then, they are closed after
    ``KILL_GRACE_PERIOD`` seconds.

    Args:
        args: Executable and arguments
        cwd: Working directory for the command
        log: Logger receiving trace and raw output events
        timeout: Seconds to wait before the process is killed

    Returns:
        CommandResult: Exit code (None if the process could not be started) and output lines
    """
    log.trace(f"Executing: {' '.join(args)}")
    log.trace(f"  WorkingDirectory: {cwd}")

    try:
        proc = subprocess.Popen(
            list(args),
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            text=True,
            encoding='utf-8',
            errors='replace',
            start_new_session=os.name != 'nt',
        )
    except OSError as e:
        log.warning(f"Could not start {args[0]}: {e}")
        return CommandResult(returncode=None)

    timed_out = False
    try:
        stdout, stderr = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        timed_out = True
        kill_process_tree(proc)
        log.warning(f"Command timed out after {timeout}s and was killed: {args[0]}")
        try:
            stdout, stderr = proc.communicate(timeout=KILL_GRACE_PERIOD)
        except subprocess.TimeoutExpired as e:
            log.warning(f"Output pipes of {args[0]} still open after kill, closing them")
            stdout, stderr = _as_text(e.output), _as_text(e.stderr)
            proc.stdout.close()
            proc.stderr.close()
            proc.kill()
            proc.poll()

    lines = (stdout or '').splitlines()
    for line in lines:
        log.raw_output(line)

    if proc.returncode != 0 and not timed_out:
        tail = (stderr or '').strip().splitlines()[-1:]
        log.trace(f"  Exit code {proc.returncode}: {tail[0] if tail else ''}")

    return CommandResult(returncode=proc.returncode, lines=lines, timed_out=timed_out)
