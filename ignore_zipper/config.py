"""
Runtime settings for archiving, with environment overrides
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ZipperError
from .utils import get_logger

logger = get_logger(__name__)

DEFAULT_COMPRESSION_LEVEL = 6
MIN_COMPRESSION_LEVEL = 0
MAX_COMPRESSION_LEVEL = 9

_TRUE_VALUES = ('true', '1', 'yes', 'on')
_FALSE_VALUES = ('false', '0', 'no', 'off')


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None:
        return default
    value = value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning(f"Ignoring unrecognised value {value!r} for {name}")
    return default


def validate_compression_level(level: int) -> int:
    """Check a ZIP deflate level is within 0 to 9"""
    if not MIN_COMPRESSION_LEVEL <= level <= MAX_COMPRESSION_LEVEL:
        raise ZipperError(
            f"Compression level must be between {MIN_COMPRESSION_LEVEL} "
            f"and {MAX_COMPRESSION_LEVEL}, got {level}"
        )
    return level


@dataclass
class ZipperSettings:
    """Settings shared by the archive and ignore layers"""
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    auto_ignore: bool = True  # Load ".*ignore" files besides the conventional three
    anchored_patterns: bool = True  # Honour leading "/" in patterns

    def __post_init__(self):
        """Validate configuration values"""
        validate_compression_level(self.compression_level)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'ZipperSettings':
        """
        Build settings from IGNORE_ZIPPER_* environment variables

        Args:
            env: Mapping to read instead of os.environ

        Returns:
            Validated settings
        """
        env = os.environ if env is None else env

        level_str = env.get('IGNORE_ZIPPER_COMPRESSION_LEVEL')
        try:
            level = int(level_str) if level_str else DEFAULT_COMPRESSION_LEVEL
        except ValueError:
            raise ZipperError(f"IGNORE_ZIPPER_COMPRESSION_LEVEL is not a number: {level_str!r}")

        return cls(
            compression_level=level,
            auto_ignore=_env_flag(env, 'IGNORE_ZIPPER_AUTO_IGNORE', True),
            anchored_patterns=_env_flag(env, 'IGNORE_ZIPPER_ANCHORED_PATTERNS', True),
        )
