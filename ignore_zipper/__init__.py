"""
ignore-zipper - package directory trees into ZIP archives while honouring
layered, gitignore-style exclusion rules
"""

__version__ = "0.1.0"

from .errors import IgnoreZipperError, SourceError, TraversalError, ZipperError
from .ignore import IgnoreResolver, IgnoreRule, RuleStore
from .traversal import DirectoryWalker, FileEntry
from .zipper import ArchiveSummary, ExtractOptions, ZipOptions, Zipper

__all__ = [
    '__version__',
    'IgnoreZipperError',
    'SourceError',
    'TraversalError',
    'ZipperError',
    'IgnoreResolver',
    'IgnoreRule',
    'RuleStore',
    'DirectoryWalker',
    'FileEntry',
    'ArchiveSummary',
    'ExtractOptions',
    'ZipOptions',
    'Zipper',
]
