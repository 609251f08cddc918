"""
Defines the abstract class for raw snapshot readers.

Readers are the only components that touch the kernel interfaces. Each call to
`read()` returns one snapshot, or an "unavailable" value (None or an empty
list) when the underlying file cannot be read; they never raise for missing or
malformed input.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)


class AbstractReader(ABC):
    """
    Abstract base class for snapshot readers.

    Subclasses implement `read()`; the base class keeps simple success and
    failure counters that end up in the service snapshot.
    """

    def __init__(self, **kwargs):
        """
        Initializes the AbstractReader.

        Args:
            **kwargs: Additional keyword arguments specific to a reader
                      implementation, kept for diagnostics.
        """
        self.reader_kwargs = kwargs
        self.reads_ok = 0
        self.reads_failed = 0
        logger.info(f"Initializing {self.__class__.__name__} with extra_args: {kwargs}")

    @abstractmethod
    def read(self) -> Any:
        """
        Take one snapshot.

        Returns:
            The snapshot, or None / an empty list if the input is unavailable.
        """
        pass

    def _record(self, ok: bool) -> None:
        if ok:
            self.reads_ok += 1
        else:
            self.reads_failed += 1

    def get_stats(self) -> dict:
        return {"reads_ok": self.reads_ok, "reads_failed": self.reads_failed}
