"""Graceful shutdown handling for import runs.

On SIGINT/SIGTERM the engine stops visiting new catalog nodes and the CLI
closes the store. Completed upserts are kept; every write is idempotent by
natural key, so the next run converges.
"""

import signal
import sys
import threading
from typing import Callable, List, Optional

from catalog_import.logging_config import get_logger

__all__ = [
    "ShutdownHandler",
    "get_shutdown_handler",
]

logger = get_logger("shutdown")


class ShutdownHandler:
    """Handles graceful shutdown on SIGINT/SIGTERM signals.

    Usage:
        handler = ShutdownHandler().install()
        handler.register_cleanup(store.close)

        while not handler.shutdown_requested:
            # Do work
            pass

        handler.cleanup()
    """

    _instance: Optional["ShutdownHandler"] = None
    _lock = threading.Lock()

    def __init__(self) -> None:
        self._shutdown_requested = threading.Event()
        self._cleanup_callbacks: List[Callable[[], None]] = []
        self._original_sigint = None
        self._original_sigterm = None
        self._installed = False

    @classmethod
    def get_instance(cls) -> "ShutdownHandler":
        """Get or create the process-wide instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    def install(self) -> "ShutdownHandler":
        """Install signal handlers.

        Only the main thread may install handlers; elsewhere this is a no-op.

        Returns:
            Self for chaining
        """
        if self._installed or threading.current_thread() is not threading.main_thread():
            return self

        self._original_sigint = signal.getsignal(signal.SIGINT)
        self._original_sigterm = signal.getsignal(signal.SIGTERM)

        signal.signal(signal.SIGINT, self._handle_signal)
        signal.signal(signal.SIGTERM, self._handle_signal)

        self._installed = True
        return self

    def uninstall(self) -> None:
        """Restore original signal handlers."""
        if not self._installed:
            return

        if self._original_sigint is not None:
            signal.signal(signal.SIGINT, self._original_sigint)
        if self._original_sigterm is not None:
            signal.signal(signal.SIGTERM, self._original_sigterm)

        self._installed = False

    def _handle_signal(self, signum: int, frame) -> None:
        signal_name = "SIGINT" if signum == signal.SIGINT else "SIGTERM"
        logger.warning(f"🛑 Received {signal_name}, initiating graceful shutdown...")
        logger.warning("    (send the signal again to force quit)")

        self._shutdown_requested.set()

        # Second signal forces exit
        signal.signal(signum, self._force_exit)

    def _force_exit(self, signum: int, frame) -> None:
        logger.error("❌ Force quitting...")
        self.cleanup()
        sys.exit(1)

    @property
    def shutdown_requested(self) -> bool:
        """Check if shutdown has been requested."""
        return self._shutdown_requested.is_set()

    def request_shutdown(self) -> None:
        """Request shutdown without a signal."""
        self._shutdown_requested.set()

    def register_cleanup(self, callback: Callable[[], None]) -> None:
        """Register a callback to run on cleanup.

        Args:
            callback: Function to call during cleanup
        """
        self._cleanup_callbacks.append(callback)

    def cleanup(self) -> None:
        """Run all registered cleanup callbacks once."""
        callbacks, self._cleanup_callbacks = self._cleanup_callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.warning(f"Cleanup callback failed: {e}")

    def reset(self) -> None:
        """Reset shutdown state (for testing or reuse)."""
        self._shutdown_requested.clear()
        self._cleanup_callbacks.clear()


def get_shutdown_handler() -> ShutdownHandler:
    """Get the process-wide shutdown handler."""
    return ShutdownHandler.get_instance()
