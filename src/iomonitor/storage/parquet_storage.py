"""
Table storage backends built on Polars.

ParquetStorage writes compressed Parquet tables; JsonStorage writes tables as
a JSON array of row objects for small, human-readable dumps. Both keep
dictionaries as indented JSON.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import polars as pl

from .base import DataStorage, PathLike

logger = logging.getLogger(__name__)


class _JsonDictMixin:
    def save_dict(self, data: Dict[str, Any], path: PathLike) -> None:
        """
        Save dictionary data as indented JSON.

        Non-JSON values (Paths, enums) are written via `str()`.
        """
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False, default=str)
            logger.debug(f"Saved dictionary data to {path}")
        except Exception as e:
            logger.error(f"Failed to save dictionary to {path}: {e}")
            raise

    def load_dict(self, path: PathLike) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            logger.debug(f"Loaded dictionary data from {path}")
            return data
        except Exception as e:
            logger.error(f"Failed to load dictionary from {path}: {e}")
            raise


class ParquetStorage(_JsonDictMixin, DataStorage):
    """
    Parquet storage with configurable compression.

    Loading supports column pruning, which is how the summary reader pulls
    only the write counters out of a large per-command table.
    """

    extension = ".parquet"

    def __init__(self, compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"):
        self.compression = compression
        logger.debug(f"Initialized ParquetStorage with compression: {compression}")

    def save_dataframe(self, df: pl.DataFrame, path: PathLike) -> None:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            df.write_parquet(path, compression=self.compression)
            logger.debug(f"Saved DataFrame with {len(df)} rows to {path}")
        except Exception as e:
            logger.error(f"Failed to save DataFrame to {path}: {e}")
            raise

    def load_dataframe(self, path: PathLike, columns: Optional[List[str]] = None) -> pl.DataFrame:
        try:
            if columns:
                df = pl.read_parquet(path, columns=columns)
                logger.debug(f"Loaded DataFrame with columns {columns} from {path}")
            else:
                df = pl.read_parquet(path)
                logger.debug(f"Loaded DataFrame with {len(df)} rows from {path}")
            return df
        except Exception as e:
            logger.error(f"Failed to load DataFrame from {path}: {e}")
            raise


class JsonStorage(_JsonDictMixin, DataStorage):
    """Tables as JSON arrays of row objects."""

    extension = ".json"

    def save_dataframe(self, df: pl.DataFrame, path: PathLike) -> None:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(df.to_dicts(), f, indent=2, ensure_ascii=False, default=str)
            logger.debug(f"Saved DataFrame with {len(df)} rows to {path}")
        except Exception as e:
            logger.error(f"Failed to save DataFrame to {path}: {e}")
            raise

    def load_dataframe(self, path: PathLike, columns: Optional[List[str]] = None) -> pl.DataFrame:
        try:
            with open(path, "r", encoding="utf-8") as f:
                rows = json.load(f)
            df = pl.DataFrame(rows)
            if columns:
                df = df.select(columns)
            logger.debug(f"Loaded DataFrame with {len(df)} rows from {path}")
            return df
        except Exception as e:
            logger.error(f"Failed to load DataFrame from {path}: {e}")
            raise
