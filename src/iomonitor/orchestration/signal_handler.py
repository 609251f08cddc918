"""
Signal handling for the storage health service.

Signal handlers cannot be bound to instances, so active services are kept in
a module-level registry and the shared handler notifies all of them.
"""

import logging
import signal
import threading
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from .chores import StorageHealthService

logger = logging.getLogger(__name__)

_active_services: Dict[int, "StorageHealthService"] = {}
_active_services_lock = threading.Lock()


class SignalHandler:
    """
    Installs SIGINT/SIGTERM handlers that request shutdown of a service,
    and restores the previous handlers on cleanup.
    """

    def __init__(self, service: "StorageHealthService"):
        self.service = service
        self._service_id = id(service)
        self._original_sigint_handler = None
        self._original_sigterm_handler = None
        self._signal_handlers_set = False

    def setup_signal_handlers(self) -> None:
        with _active_services_lock:
            _active_services[self._service_id] = self.service
        try:
            self._original_sigint_handler = signal.signal(signal.SIGINT, self._global_signal_handler)
            self._original_sigterm_handler = signal.signal(signal.SIGTERM, self._global_signal_handler)
            self._signal_handlers_set = True
            logger.debug("Signal handlers installed")
        except ValueError as e:
            # signal.signal only works in the main thread
            logger.warning(f"Failed to set up signal handlers: {e}")

    def cleanup_signal_handlers(self) -> None:
        with _active_services_lock:
            _active_services.pop(self._service_id, None)

        if not self._signal_handlers_set:
            return
        try:
            if self._original_sigint_handler is not None:
                signal.signal(signal.SIGINT, self._original_sigint_handler)
            if self._original_sigterm_handler is not None:
                signal.signal(signal.SIGTERM, self._original_sigterm_handler)
            logger.debug("Signal handlers restored")
        except ValueError as e:
            logger.warning(f"Failed to restore signal handlers: {e}")
        finally:
            self._signal_handlers_set = False

    def __enter__(self) -> "SignalHandler":
        self.setup_signal_handlers()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.cleanup_signal_handlers()

    @staticmethod
    def _global_signal_handler(signum: int, frame: Any) -> None:
        logger.warning(f"Signal {signum} received. Requesting shutdown of active services.")
        with _active_services_lock:
            for service in _active_services.values():
                service.shutdown_requested.set()
