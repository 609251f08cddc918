"""
Abstract base class for result storage backends.

A backend persists two kinds of data: tables (Polars DataFrames such as the
per-command I/O view, disk reports and stall episodes) and small dictionaries
(run metadata). Table files carry the backend's `extension`.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import polars as pl

PathLike = Union[str, Path]


class DataStorage(ABC):
    """Abstract base class for data storage implementations."""

    extension: str = ""

    @abstractmethod
    def save_dataframe(self, df: pl.DataFrame, path: PathLike) -> None:
        """
        Save a Polars DataFrame to the specified path.

        Args:
            df: Polars DataFrame to save
            path: File path to save to
        """

    @abstractmethod
    def load_dataframe(
        self, path: PathLike, columns: Optional[List[str]] = None
    ) -> pl.DataFrame:
        """
        Load a Polars DataFrame from the specified path.

        Args:
            path: File path to load from
            columns: Optional list of columns to load

        Returns:
            Loaded Polars DataFrame
        """

    @abstractmethod
    def save_dict(self, data: Dict[str, Any], path: PathLike) -> None:
        """Save dictionary data to the specified path."""

    @abstractmethod
    def load_dict(self, path: PathLike) -> Dict[str, Any]:
        """Load dictionary data from the specified path."""

    def file_exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def get_file_size(self, path: PathLike) -> int:
        """Size of a file in bytes, 0 if it does not exist."""
        try:
            return Path(path).stat().st_size
        except FileNotFoundError:
            return 0
