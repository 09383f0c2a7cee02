"""
Spawn facility for target processes started by procrec itself.

The child shares the terminal's stdin/stdout/stderr, the same way a shell
would run it.
"""
import subprocess
from typing import List, Optional, Sequence

from procrec.errors import SpawnError
from procrec.util.file_utils import resolve_cmd
from procrec.util.log_config import get_logger

logger = get_logger(__name__)


class ChildProcess:
    """Owned handle to a spawned child process."""

    def __init__(self, popen: subprocess.Popen, command: Sequence[str]) -> None:
        self._popen = popen
        self.command: List[str] = list(command)

    @property
    def pid(self) -> int:
        return self._popen.pid

    @property
    def returncode(self) -> Optional[int]:
        return self._popen.returncode

    def try_join(self) -> Optional[int]:
        """Reap the child if it has exited. Never blocks."""
        return self._popen.poll()

    def terminate(self) -> None:
        self._popen.terminate()

    def kill(self) -> None:
        self._popen.kill()

    def join(self, timeout: Optional[float] = None) -> int:
        """
        Block until the child exits and is reaped.

        Raises:
            subprocess.TimeoutExpired: if `timeout` elapses first
        """
        return self._popen.wait(timeout=timeout)


class SubprocessSpawner:

    def spawn(self, program: str, args: Sequence[str] = ()) -> ChildProcess:
        """
        Start `program` with `args` and return the owned child.

        Raises:
            SpawnError: if the program cannot be found or started
        """
        command = [program, *args]
        try:
            cmd_args = [resolve_cmd(program), *args]
            popen = subprocess.Popen(cmd_args)
        except (OSError, ValueError) as e:
            raise SpawnError(command, e) from e
        logger.debug(f"Spawned PID {popen.pid}: {' '.join(command)}")
        return ChildProcess(popen, command)
