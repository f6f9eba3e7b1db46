# ==============================================================================
# Alerts Runner
# ==============================================================================
"""
Foreground runner for the alert evaluator.

Started by 'pagepulse alerts run'. Keeps the evaluator's scheduler running
until SIGINT/SIGTERM, then stops it after any in-flight tick completes and
closes the evaluator's connections.
"""

import logging
import signal
import threading

from pagepulse.alerts.evaluator import AlertEvaluator
from pagepulse.alerts.factory import create_evaluator
from pagepulse.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


class AlertsRunner:
    """Runs an AlertEvaluator until shutdown is requested."""

    def __init__(
        self,
        evaluator: AlertEvaluator | None = None,
        settings: Settings | None = None,
        run_immediately: bool = True,
    ):
        """
        Args:
            evaluator: Evaluator to drive. Built from settings if None.
            settings: Application settings. If None, uses get_settings().
            run_immediately: Evaluate once at startup instead of waiting a
                full interval for the first tick
        """
        self._settings = settings or get_settings()
        self._evaluator = evaluator
        self._run_immediately = run_immediately
        self._shutdown = threading.Event()

    @property
    def evaluator(self) -> AlertEvaluator | None:
        return self._evaluator

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown.is_set()

    def run(self) -> None:
        """Evaluate on schedule until SIGINT/SIGTERM or request_shutdown()."""
        signal.signal(signal.SIGTERM, self._handle_signal)
        signal.signal(signal.SIGINT, self._handle_signal)
        logging.basicConfig(
            level=getattr(logging, self._settings.log_level.upper(), logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

        try:
            if self._evaluator is None:
                self._evaluator = create_evaluator(self._settings)
            if self._run_immediately:
                self._evaluator.evaluate()
            self._evaluator.start()
            logger.info("Alerts runner started, press Ctrl+C to stop")

            while not self._shutdown.wait(timeout=1.0):
                pass
        except KeyboardInterrupt:
            logger.info("Alerts runner interrupted by keyboard")
        finally:
            if self._evaluator is not None:
                self._evaluator.close()
            logger.info("Alerts runner shutdown complete")

    def request_shutdown(self) -> None:
        """Ask a running loop to stop. Safe to call from any thread."""
        self._shutdown.set()

    def _handle_signal(self, signum, frame) -> None:
        logger.info("Received signal %d, requesting shutdown...", signum)
        self.request_shutdown()
