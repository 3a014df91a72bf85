"""SignalHandler - turns SIGINT/SIGTERM into a shutdown flag."""

import logging
import signal


class SignalHandler:
    """Records that shutdown was requested; the manager loop acts on it."""

    def __init__(self) -> None:
        self.shutdown_initiated = False

    def stop(self) -> None:
        self.shutdown_initiated = True

    def setup_signal_handlers(self) -> None:  # pragma: no cover
        """Install SIGINT/SIGTERM handlers that set the shutdown flag once."""

        def handler(signum: int, _frame: object | None) -> None:  # noqa: D401
            if self.shutdown_initiated:
                return
            logging.warning(
                f"🛑 Signal received - initiating shutdown (signal={signum})"
            )
            self.shutdown_initiated = True

        signal.signal(signal.SIGINT, handler)
        signal.signal(signal.SIGTERM, handler)
