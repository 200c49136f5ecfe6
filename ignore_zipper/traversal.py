"""
Recursive directory traversal that skips ignored entries

The walker is a generator: nothing is read from disk until the consumer
pulls the next entry, and abandoning the iterator stops the traversal.
"""

import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Union

from .errors import TraversalError
from .ignore import IgnoreResolver
from .utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FileEntry:
    """A kept filesystem entry"""
    absolute_path: Path
    relative_path: str  # Forward slashes, relative to the traversal root
    is_directory: bool
    stats: os.stat_result

    @property
    def is_symlink(self) -> bool:
        return stat.S_ISLNK(self.stats.st_mode)


class DirectoryWalker:
    """
    Depth-first, pre-order traversal of a directory tree

    Each directory is checked against the ignore rules before it is entered;
    an ignored directory is pruned with everything below it. Symbolic links
    are reported as leaf entries and never followed, so link cycles cannot
    make the walk loop.
    """

    def __init__(self, base_path: Union[str, Path],
                 resolver: Optional[IgnoreResolver] = None):
        """
        Initialize walker

        Args:
            base_path: Traversal root
            resolver: Ignore resolver (one with no rules if omitted)
        """
        self.resolver = resolver if resolver is not None else IgnoreResolver(base_path)
        self.base_path = self.resolver.base_path

    def walk_directory(self, directory: Optional[Union[str, Path]] = None) -> Iterator[FileEntry]:
        """
        Lazily yield every kept entry below a directory

        Entries within one directory come in name order; a directory's
        children follow it before its next sibling.

        Args:
            directory: Directory to walk (defaults to the traversal root)

        Yields:
            FileEntry for each entry that is not ignored

        Raises:
            TraversalError: On any I/O failure other than a permission denial
        """
        directory = Path(directory).resolve() if directory is not None else self.base_path

        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except PermissionError as e:
            logger.debug(f"Permission denied, skipping {directory}: {e}")
            return
        except OSError as e:
            raise TraversalError(directory, e) from e

        for entry in entries:
            full_path = Path(entry.path)

            try:
                is_directory = entry.is_dir(follow_symlinks=False)
            except PermissionError as e:
                logger.debug(f"Permission denied, skipping {full_path}: {e}")
                continue
            except OSError as e:
                raise TraversalError(full_path, e) from e

            if self.resolver.should_ignore(full_path, is_directory):
                continue

            try:
                stats = entry.stat(follow_symlinks=False)
            except PermissionError as e:
                logger.debug(f"Permission denied, skipping {full_path}: {e}")
                continue
            except OSError as e:
                raise TraversalError(full_path, e) from e

            yield FileEntry(
                absolute_path=full_path,
                relative_path=Path(os.path.relpath(full_path, self.base_path)).as_posix(),
                is_directory=is_directory,
                stats=stats,
            )

            if is_directory:
                yield from self.walk_directory(full_path)

    def get_file_list(self, directory: Optional[Union[str, Path]] = None) -> List[FileEntry]:
        """Collect every kept entry, directories included"""
        return list(self.walk_directory(directory))

    def get_files_only(self, directory: Optional[Union[str, Path]] = None) -> List[FileEntry]:
        """Collect every kept entry that is not a directory"""
        return [entry for entry in self.walk_directory(directory) if not entry.is_directory]

    def iter_files(self, directory: Optional[Union[str, Path]] = None) -> Iterator[FileEntry]:
        """Lazily yield kept entries that are not directories (the archive feed)"""
        for entry in self.walk_directory(directory):
            if not entry.is_directory:
                yield entry
