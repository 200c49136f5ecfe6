"""
ZIP archive creation, extraction and listing with ignore rules applied
"""

import logging
import shutil
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from .config import ZipperSettings, validate_compression_level
from .errors import SourceError, ZipperError
from .ignore import IgnoreResolver, LoadResult, RuleStore
from .traversal import DirectoryWalker
from .utils import get_logger, log_with_context

logger = get_logger(__name__)


@dataclass
class ZipOptions:
    """Rule sources and output options for create_zip"""
    compression_level: Optional[int] = None  # None means the settings default
    ignore_files: List[Union[str, Path]] = field(default_factory=list)
    custom_patterns: List[str] = field(default_factory=list)
    ignore_pattern: Optional[str] = None  # Glob selecting extra ignore files in the source root
    auto_ignore: Optional[bool] = None  # None means the settings default
    verbose: bool = False


@dataclass
class ExtractOptions:
    overwrite: bool = False
    verbose: bool = False


@dataclass
class ArchiveSummary:
    """What an archive operation did"""
    archive_path: Path
    entries: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.entries)


def is_within_directory(root: Path, target: Path, allow_root: bool = True) -> bool:
    """Check that target resolves below root, or to root itself when allow_root"""
    root = root.resolve()
    target = target.resolve()
    if target == root:
        return allow_root
    return root in target.parents


class Zipper:
    """
    Archives a directory tree, skipping ignored files

    One Zipper is one session: it owns the rule store, resolver and walker
    used for its base path.
    """

    def __init__(self, base_path: Union[str, Path],
                 settings: Optional[ZipperSettings] = None):
        self.base_path = Path(base_path).resolve()
        self.settings = settings if settings is not None else ZipperSettings()
        self.rule_store = RuleStore()
        self.resolver = IgnoreResolver(
            self.base_path,
            self.rule_store,
            anchored_patterns=self.settings.anchored_patterns,
        )
        self.walker = DirectoryWalker(self.base_path, self.resolver)

    def load_rules(self, options: Optional[ZipOptions] = None) -> List[LoadResult]:
        """
        Load every rule source named by the options, in precedence order

        Conventional and auto-discovered ignore files come first, then files
        matching options.ignore_pattern, then explicit ignore files, then
        ad-hoc patterns; later sources override earlier ones. Rules from a
        previous call are discarded first.

        Args:
            options: Rule sources (defaults only if omitted)

        Returns:
            LoadResult for every ignore file attempted
        """
        options = options or ZipOptions()
        self.rule_store.clear()
        auto_ignore = self.settings.auto_ignore if options.auto_ignore is None else options.auto_ignore

        results = self.rule_store.load_default_files(self.base_path, auto_discover=auto_ignore)

        if options.ignore_pattern:
            results.extend(self.rule_store.load_files_by_pattern(self.base_path, options.ignore_pattern))

        for ignore_file in options.ignore_files:
            results.append(self.rule_store.load_file(Path(ignore_file).resolve()))

        for pattern in options.custom_patterns:
            self.rule_store.add_pattern(pattern)

        logger.info(
            f"Loaded {len(self.rule_store)} rules from "
            f"{len(self.rule_store.loaded_files)} ignore files"
        )
        return results

    def create_zip(self, source_path: Union[str, Path], output_path: Union[str, Path],
                   options: Optional[ZipOptions] = None) -> ArchiveSummary:
        """
        Create a ZIP file of source_path with ignore rules applied

        Args:
            source_path: Directory to archive
            output_path: ZIP file to write (parent directories are created)
            options: Rule sources and compression options

        Returns:
            ArchiveSummary listing the archived relative paths

        Raises:
            SourceError: If source_path is missing or not a directory
            ZipperError: On an invalid compression level or a write failure
        """
        options = options or ZipOptions()
        source_path = Path(source_path).resolve()
        output_path = Path(output_path).resolve()

        if not source_path.exists():
            raise SourceError(source_path, "Source path does not exist")
        if not source_path.is_dir():
            raise SourceError(source_path, "Source must be a directory")

        level = self.settings.compression_level if options.compression_level is None else options.compression_level
        validate_compression_level(level)
        compression = zipfile.ZIP_STORED if level == 0 else zipfile.ZIP_DEFLATED

        self.load_rules(options)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        summary = ArchiveSummary(archive_path=output_path)

        try:
            with zipfile.ZipFile(output_path, 'w', compression=compression, compresslevel=level) as archive:
                for entry in self.walker.iter_files(source_path):
                    # Never pack the archive into itself
                    if entry.absolute_path == output_path:
                        continue
                    if entry.is_symlink and not entry.absolute_path.exists():
                        logger.warning(f"Skipping broken symbolic link: {entry.relative_path}")
                        summary.skipped.append(entry.relative_path)
                        continue
                    # zipfile would follow the link and write an empty directory entry
                    if entry.is_symlink and entry.absolute_path.is_dir():
                        logger.warning(f"Skipping symbolic link to directory: {entry.relative_path}")
                        summary.skipped.append(entry.relative_path)
                        continue

                    if options.verbose:
                        logger.info(f"Adding: {entry.relative_path}")
                    archive.write(entry.absolute_path, arcname=entry.relative_path)
                    summary.entries.append(entry.relative_path)
        except OSError as e:
            raise ZipperError(f"Failed to write {output_path}: {e}") from e

        log_with_context(
            logger, logging.INFO, f"Created {output_path} ({output_path.stat().st_size} bytes)",
            files=summary.count, skipped=len(summary.skipped),
        )
        return summary

    def extract_zip(self, zip_path: Union[str, Path], output_path: Union[str, Path],
                    options: Optional[ExtractOptions] = None) -> ArchiveSummary:
        """
        Extract a ZIP file

        Members whose names would land outside output_path are skipped with a
        warning, as are existing files unless options.overwrite is set.

        Args:
            zip_path: ZIP file to read
            output_path: Directory to extract into (created if missing)
            options: Overwrite and verbosity flags

        Returns:
            ArchiveSummary with extracted and skipped member names

        Raises:
            ZipperError: If the archive is missing or corrupt
        """
        options = options or ExtractOptions()
        zip_path = Path(zip_path).resolve()
        output_root = Path(output_path).resolve()

        if not zip_path.exists():
            raise ZipperError(f"ZIP file not found: {zip_path}")

        output_root.mkdir(parents=True, exist_ok=True)
        summary = ArchiveSummary(archive_path=zip_path)

        try:
            with zipfile.ZipFile(zip_path) as archive:
                for info in archive.infolist():
                    target = output_root / info.filename

                    # A file member may never resolve to the output root itself
                    if not is_within_directory(output_root, target, allow_root=info.is_dir()):
                        logger.warning(f"Skipping potentially dangerous path: {info.filename}")
                        summary.skipped.append(info.filename)
                        continue

                    if info.is_dir():
                        target.mkdir(parents=True, exist_ok=True)
                        if options.verbose:
                            logger.info(f"Created directory: {info.filename}")
                        continue

                    if target.is_dir():
                        logger.warning(f"Directory in the way, skipping: {info.filename}")
                        summary.skipped.append(info.filename)
                        continue

                    if target.exists() and not options.overwrite:
                        logger.warning(f"File exists, skipping: {info.filename}")
                        summary.skipped.append(info.filename)
                        continue

                    target.parent.mkdir(parents=True, exist_ok=True)
                    with archive.open(info) as source, open(target, 'wb') as destination:
                        shutil.copyfileobj(source, destination)

                    if options.verbose:
                        logger.info(f"Extracted: {info.filename}")
                    summary.entries.append(info.filename)
        except zipfile.BadZipFile as e:
            raise ZipperError(f"Not a valid ZIP file: {zip_path}: {e}") from e

        return summary

    def list_zip_contents(self, zip_path: Union[str, Path]) -> List[str]:
        """
        List member names of a ZIP file in archive order

        Raises:
            ZipperError: If the archive is missing or corrupt
        """
        zip_path = Path(zip_path).resolve()
        if not zip_path.exists():
            raise ZipperError(f"ZIP file not found: {zip_path}")

        try:
            with zipfile.ZipFile(zip_path) as archive:
                return archive.namelist()
        except zipfile.BadZipFile as e:
            raise ZipperError(f"Not a valid ZIP file: {zip_path}: {e}") from e
