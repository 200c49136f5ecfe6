"""
Exceptions raised by ignore-zipper
"""

from pathlib import Path
from typing import Optional, Union


class IgnoreZipperError(Exception):
    """Base class for errors the command line reports as failures"""


class SourceError(IgnoreZipperError):
    """The directory to archive is missing or is not a directory"""

    def __init__(self, path: Union[str, Path], message: str):
        self.path = Path(path)
        super().__init__(f"{message}: {self.path}")


class TraversalError(IgnoreZipperError):
    """An I/O failure, other than a permission denial, while walking a tree"""

    def __init__(self, path: Union[str, Path], cause: Optional[OSError] = None):
        self.path = Path(path)
        self.cause = cause
        detail = f": {cause.strerror or cause}" if cause is not None else ""
        super().__init__(f"Cannot read {self.path}{detail}")


class ZipperError(IgnoreZipperError):
    """Archive-level failure: missing or corrupt archive, bad options"""
