"""
Storage module for storage health results.

Tables (per-command I/O, disk reports, stall episodes) are held as Polars
DataFrames and written as compressed Parquet or as JSON rows; metadata is
always JSON and the summary is plain text.
"""

from .base import DataStorage
from .data_manager import DataStorageManager
from .factory import create_storage
from .parquet_storage import JsonStorage, ParquetStorage

__all__ = ["DataStorage", "DataStorageManager", "JsonStorage", "ParquetStorage", "create_storage"]
