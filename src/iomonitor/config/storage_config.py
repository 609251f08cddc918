"""
Storage configuration model and validation.

This module defines the StorageConfig dataclass which describes how the
per-command I/O table, disk reports and stall episodes are persisted.
"""

from typing import Literal, Dict, Any
from dataclasses import dataclass

SUPPORTED_COMPRESSIONS = ("snappy", "gzip", "brotli", "lz4", "zstd")


@dataclass
class StorageConfig:
    """
    Configuration model for result storage, loaded from `[monitor.storage]`.

    Attributes:
        format: Storage format for tabular results
            - 'parquet': Columnar format with compression (default)
            - 'json': Human-readable, for small dumps
        compression: Compression algorithm for Parquet output
        generate_csv: Whether to also write CSV copies of the tabular results

    Note:
        Compression only applies to Parquet. Metadata and summaries are
        always written as JSON / plain text.
    """

    format: Literal["parquet", "json"] = "parquet"
    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"
    generate_csv: bool = False

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "StorageConfig":
        """
        Create a StorageConfig instance from a dictionary.

        Raises:
            ValueError: If invalid configuration values are provided
        """
        format_type = config_dict.get("format", "parquet")
        compression = config_dict.get("compression", "snappy")
        generate_csv = config_dict.get("generate_csv", False)

        if format_type not in ("parquet", "json"):
            raise ValueError(f"Unsupported storage format: {format_type}")

        if format_type == "parquet" and compression not in SUPPORTED_COMPRESSIONS:
            raise ValueError(f"Unsupported compression algorithm: {compression}")

        if not isinstance(generate_csv, bool):
            raise ValueError("generate_csv must be a boolean")

        return cls(format=format_type, compression=compression, generate_csv=generate_csv)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format,
            "compression": self.compression,
            "generate_csv": self.generate_csv,
        }
