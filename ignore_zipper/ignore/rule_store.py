"""
Rule store: parses ignore files and ad-hoc patterns into ordered rules
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from .constants import (
    AUTO_IGNORE_PREFIX,
    AUTO_IGNORE_SUFFIX,
    COMMENT_PREFIX,
    DEFAULT_IGNORE_FILES,
    LINE_SEPARATOR,
    MAX_IGNORE_FILE_SIZE,
    NEGATION_PREFIX,
    PATH_SEPARATOR,
)
from .pattern_matcher import matches, validate_pattern
from ..utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class IgnoreRule:
    """A single parsed ignore pattern"""
    pattern: str
    negate: bool = False
    directory_only: bool = False
    anchored: bool = False
    source: Optional[str] = None  # Base name of the ignore file, None for ad-hoc patterns

    def __str__(self) -> str:
        text = self.pattern
        if self.anchored:
            text = PATH_SEPARATOR + text
        if self.directory_only:
            text = text + PATH_SEPARATOR
        if self.negate:
            text = NEGATION_PREFIX + text
        return text


class LoadStatus(Enum):
    """Outcome of loading one ignore file"""
    LOADED = "loaded"
    MISSING = "missing"
    UNREADABLE = "unreadable"


@dataclass
class PatternWarning:
    """A pattern that was kept but can never match"""
    line: int
    pattern: str
    message: str


@dataclass
class LoadResult:
    """Information about an attempt to load an ignore file"""
    path: Path
    status: LoadStatus
    rules_added: int = 0
    warnings: List[PatternWarning] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def loaded(self) -> bool:
        return self.status is LoadStatus.LOADED


def parse_line(raw: str, source: Optional[str] = None) -> Optional[IgnoreRule]:
    """
    Parse one ignore-file line into a rule

    Args:
        raw: Raw line text
        source: Base name of the file the line came from

    Returns:
        IgnoreRule, or None for blank lines and comments
    """
    pattern = raw.strip()

    # Skip empty lines and comments
    if not pattern or pattern.startswith(COMMENT_PREFIX):
        return None

    negate = False
    directory_only = False
    anchored = False

    if pattern.startswith(NEGATION_PREFIX):
        negate = True
        pattern = pattern[1:]

    if pattern.endswith(PATH_SEPARATOR):
        directory_only = True
        pattern = pattern[:-1]

    if pattern.startswith(PATH_SEPARATOR):
        anchored = True
        pattern = pattern[1:]

    # "!", "/" and "!/" leave nothing to match
    if not pattern:
        return None

    return IgnoreRule(
        pattern=pattern,
        negate=negate,
        directory_only=directory_only,
        anchored=anchored,
        source=source,
    )


def is_auto_ignore_name(name: str) -> bool:
    """Check whether a file name looks like a ".<tool>ignore" file"""
    return name.startswith(AUTO_IGNORE_PREFIX) and name.endswith(AUTO_IGNORE_SUFFIX)


class RuleStore:
    """
    Ordered collection of ignore rules for one archiving session

    Rules are only ever appended (or all cleared at once); later rules
    override earlier ones when both match a path.
    """

    def __init__(self):
        self._rules: List[IgnoreRule] = []
        self._loaded_files: List[str] = []

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules)

    @property
    def rules(self) -> List[IgnoreRule]:
        return list(self._rules)

    @property
    def loaded_files(self) -> List[str]:
        """Base names of ignore files loaded so far, in first-load order"""
        return list(self._loaded_files)

    def add_pattern(self, raw: str) -> Optional[IgnoreRule]:
        """
        Parse and append an ad-hoc pattern

        Args:
            raw: Pattern in ignore-file syntax

        Returns:
            The appended rule, or None if the pattern was blank or a comment
        """
        rule = parse_line(raw)
        if rule:
            self._append(rule)
        return rule

    def load_file(self, path: Union[str, Path]) -> LoadResult:
        """
        Load an ignore file and append its rules in file order

        A missing file is not an error. Loading the same file twice appends
        its rules twice but records the file name once.

        Args:
            path: Path to the ignore file

        Returns:
            LoadResult describing what happened
        """
        path = Path(path)

        if not path.is_file():
            logger.debug(f"Ignore file not found, skipping: {path}")
            return LoadResult(path=path, status=LoadStatus.MISSING)

        try:
            file_size = path.stat().st_size
            if file_size > MAX_IGNORE_FILE_SIZE:
                message = f"File too large: {file_size} bytes (max: {MAX_IGNORE_FILE_SIZE})"
                logger.warning(f"Skipping ignore file {path}: {message}")
                return LoadResult(path=path, status=LoadStatus.UNREADABLE, error=message)

            content = path.read_bytes().decode('utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read ignore file {path}: {e}")
            return LoadResult(path=path, status=LoadStatus.UNREADABLE, error=str(e))

        result = LoadResult(path=path, status=LoadStatus.LOADED)

        for line_num, line in enumerate(content.split(LINE_SEPARATOR), 1):
            rule = parse_line(line, source=path.name)
            if rule is None:
                continue

            is_valid, error = validate_pattern(rule.pattern)
            if not is_valid:
                # Kept so the rule list mirrors the file; it simply never matches
                warning = PatternWarning(line=line_num, pattern=line.strip(),
                                         message=error or "Invalid pattern")
                result.warnings.append(warning)
                logger.warning(f"{path}:{line_num}: {warning.message}")

            self._append(rule)
            result.rules_added += 1

        if path.name not in self._loaded_files:
            self._loaded_files.append(path.name)

        logger.info(f"Loaded {result.rules_added} rules from {path}")
        return result

    def load_default_files(self, base_dir: Union[str, Path],
                           auto_discover: bool = True) -> List[LoadResult]:
        """
        Load the conventional ignore files, then any other ".*ignore" files

        Auto-discovered files are loaded in directory-listing order, which
        depends on the filesystem.

        Args:
            base_dir: Directory holding the ignore files
            auto_discover: Also load other ".*ignore" files found in base_dir

        Returns:
            One LoadResult per file attempted
        """
        base_dir = Path(base_dir)
        results = [self.load_file(base_dir / name) for name in DEFAULT_IGNORE_FILES]

        if not auto_discover:
            return results

        for name in self._list_names(base_dir):
            if name in DEFAULT_IGNORE_FILES or not is_auto_ignore_name(name):
                continue
            candidate = base_dir / name
            if candidate.is_file():
                results.append(self.load_file(candidate))

        return results

    def load_files_by_pattern(self, base_dir: Union[str, Path],
                              glob_pattern: str) -> List[LoadResult]:
        """
        Load every file in base_dir whose name matches a glob

        Args:
            base_dir: Directory to list
            glob_pattern: Glob matched against file names, dot-files included

        Returns:
            One LoadResult per matching file
        """
        base_dir = Path(base_dir)
        results = []

        for name in self._list_names(base_dir):
            if not matches(name, glob_pattern, anchored=True):
                continue
            candidate = base_dir / name
            if candidate.is_file():
                results.append(self.load_file(candidate))

        return results

    def clear(self):
        """Drop all rules and the loaded-file record"""
        self._rules.clear()
        self._loaded_files.clear()

    def _append(self, rule: IgnoreRule):
        self._rules.append(rule)
        logger.trace(f"Added rule {rule} (source: {rule.source or 'pattern'})")

    @staticmethod
    def _list_names(directory: Path) -> List[str]:
        try:
            return os.listdir(directory)
        except OSError as e:
            logger.debug(f"Cannot list {directory}, skipping discovery: {e}")
            return []
