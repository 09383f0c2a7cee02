"""
Cancellation of the sampling loop from SIGINT / SIGTERM.

The signal handler only flips a flag. The sampling loop reads it between
ticks, so teardown of a spawned child always happens on the normal
control-flow path.
"""
import signal
from typing import Callable, Dict, Iterable, Optional

from procrec.errors import HandlerInstallError
from procrec.util.log_config import get_logger

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)

logger = get_logger(__name__)


class CancellationFlag:
    """Process-wide stop request. Written once by the handler, read by the loop."""

    def __init__(self) -> None:
        self._cancelled = False

    def set(self) -> None:
        self._cancelled = True

    def is_set(self) -> bool:
        return self._cancelled

    def __bool__(self) -> bool:
        return self._cancelled

    def __repr__(self) -> str:
        return f"CancellationFlag(cancelled={self._cancelled})"


class InterruptHandler:
    """Installs signal handlers that set a CancellationFlag."""

    def __init__(self, flag: CancellationFlag, signals: Iterable[int] = DEFAULT_SIGNALS) -> None:
        self.flag = flag
        self.signals = tuple(signals)
        self._previous: Dict[int, Optional[Callable]] = {}

    def _handle(self, signum, frame) -> None:
        self.flag.set()

    def install(self) -> "InterruptHandler":
        """
        Raises:
            HandlerInstallError: if any handler cannot be installed, e.g.
                when called outside the main thread
        """
        try:
            for signum in self.signals:
                self._previous[signum] = signal.signal(signum, self._handle)
        except (ValueError, OSError) as e:
            self.restore()
            raise HandlerInstallError(f"Error setting interrupt handler: {e}") from e
        logger.debug(f"Installed interrupt handler for {[signal.Signals(s).name for s in self.signals]}")
        return self

    def restore(self) -> None:
        for signum, previous in self._previous.items():
            try:
                signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
            except (ValueError, OSError) as e:
                logger.warning(f"Failed to restore handler for signal {signum}: {e}")
        self._previous.clear()

    def __enter__(self) -> CancellationFlag:
        self.install()
        return self.flag

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.restore()


def install_interrupt_handler(flag: CancellationFlag, signals: Iterable[int] = DEFAULT_SIGNALS) -> InterruptHandler:
    return InterruptHandler(flag, signals).install()
