"""
eMMC flash health from the EXT_CSD register dump.

The debugfs `ext_csd` file is a single hex string, two characters per
register byte. Health fields only exist from EXT_CSD revision 7 (eMMC 5.0).
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..models.disk import EmmcInfo
from .base import AbstractReader

logger = logging.getLogger(__name__)

EXT_CSD_REV_IDX = 192
EXT_PRE_EOL_INFO_IDX = 267
EXT_DEVICE_LIFE_TIME_EST_A_IDX = 268
EXT_DEVICE_LIFE_TIME_EST_B_IDX = 269

# Index is the EXT_CSD_REV value.
MMC_VERSIONS = ("4.0", "4.1", "4.2", "4.3", "Obsolete", "4.41", "4.5", "5.0", "5.1")
MIN_HEALTH_REV = 7


def _byte_at(ext_csd: str, idx: int) -> int:
    return int(ext_csd[idx * 2 : idx * 2 + 2], 16)


def parse_emmc_ecsd(path: Union[str, Path]) -> Optional[EmmcInfo]:
    """
    Decode the health fields of an EXT_CSD dump.

    Returns:
        EmmcInfo, or None if the file is unreadable, truncated, not hex, or
        the device predates eMMC 5.0.
    """
    try:
        ext_csd = Path(path).read_text().strip()
    except (FileNotFoundError, PermissionError, OSError) as e:
        logger.debug(f"Cannot read EXT_CSD from {path}: {e}")
        return None

    if len(ext_csd) < (EXT_DEVICE_LIFE_TIME_EST_B_IDX + 1) * 2:
        logger.debug(f"EXT_CSD dump too short: {len(ext_csd)} chars")
        return None

    try:
        rev = _byte_at(ext_csd, EXT_CSD_REV_IDX)
        if rev < MIN_HEALTH_REV:
            logger.debug(f"EXT_CSD revision {rev} has no health information")
            return None
        return EmmcInfo(
            mmc_ver=MMC_VERSIONS[rev] if rev < len(MMC_VERSIONS) else "Unknown",
            eol=_byte_at(ext_csd, EXT_PRE_EOL_INFO_IDX),
            lifetime_a=_byte_at(ext_csd, EXT_DEVICE_LIFE_TIME_EST_A_IDX),
            lifetime_b=_byte_at(ext_csd, EXT_DEVICE_LIFE_TIME_EST_B_IDX),
        )
    except ValueError:
        logger.debug(f"EXT_CSD dump in {path} is not valid hex")
        return None


class EmmcInfoReader(AbstractReader):
    """Reads EmmcInfo from a fixed EXT_CSD path."""

    def __init__(self, ext_csd_path: Union[str, Path]):
        super().__init__(ext_csd_path=str(ext_csd_path))
        self.ext_csd_path = Path(ext_csd_path)

    def read(self) -> Optional[EmmcInfo]:
        info = parse_emmc_ecsd(self.ext_csd_path)
        self._record(info is not None)
        if info is not None:
            logger.info(
                f"eMMC {info.mmc_ver}: pre-EOL={info.eol}, "
                f"lifetime A={info.lifetime_a}, B={info.lifetime_b}"
            )
        return info
