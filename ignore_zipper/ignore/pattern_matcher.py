"""
Glob matching of a single ignore pattern against a relative path

Patterns are translated to regular expressions by pathspec's git wild-match
compiler, so `*`, `?`, `[...]` and `**` behave as they do in .gitignore files
and wildcards match dot-files. The translated expression is trimmed so that a
pattern only matches the path it names, never that path's descendants: the
resolver is asked about each directory before the walker descends into it.
"""

import re
from functools import lru_cache
from typing import List, Optional, Pattern, Tuple

from pathspec.patterns.gitwildmatch import GitWildMatchPattern, GitWildMatchPatternError

from .constants import MAX_CACHE_SIZE, PATH_SEPARATOR
from ..utils import get_logger

logger = get_logger(__name__)

# Tails pathspec appends to the last segment so a pattern also covers
# everything below the matched path
_DESCENDANT_TAILS = (
    '(?:(?P<ps_d>/).*)?$',
    '(?:/.*)?$',
)


def _to_glob_regex(pattern: str) -> Optional[str]:
    """
    Translate a glob pattern into an anchored regular expression string

    Raises:
        GitWildMatchPatternError: If the pattern is malformed
    """
    # The leading slash anchors the pattern to the start of the candidate and
    # keeps pathspec from reading "#..." or "!..." as comments or negations
    regex, _include = GitWildMatchPattern.pattern_to_regex(PATH_SEPARATOR + pattern)
    if regex is None:
        return None

    for tail in _DESCENDANT_TAILS:
        if regex.endswith(tail):
            return regex[:-len(tail)] + '$'
    return regex


@lru_cache(maxsize=MAX_CACHE_SIZE)
def compile_pattern(pattern: str) -> Optional[Pattern[str]]:
    """
    Compile a glob pattern with caching

    Args:
        pattern: Glob pattern without negation prefix or trailing slash

    Returns:
        Compiled expression, or None when the pattern is malformed
    """
    try:
        regex = _to_glob_regex(pattern)
        if regex is None:
            return None
        return re.compile(regex)
    except (GitWildMatchPatternError, ValueError, re.error) as e:
        logger.debug(f"Pattern '{pattern}' never matches: {e}")
        return None


def validate_pattern(pattern: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a single pattern

    Args:
        pattern: Pattern to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        regex = _to_glob_regex(pattern)
        if regex is None:
            return False, "Pattern does not match anything"
        re.compile(regex)
        return True, None
    except (GitWildMatchPatternError, ValueError, re.error) as e:
        return False, str(e)


def path_suffixes(candidate_path: str) -> List[str]:
    """
    List the candidate and every path left after dropping leading segments

    >>> path_suffixes("a/b/c")
    ['a/b/c', 'b/c', 'c']
    """
    segments = candidate_path.split(PATH_SEPARATOR)
    return [PATH_SEPARATOR.join(segments[i:]) for i in range(len(segments))]


def matches(candidate_path: str, pattern: str, anchored: bool = False) -> bool:
    """
    Check whether a pattern matches a forward-slash relative path

    Exact equality always matches. Otherwise the glob is tried against the
    candidate and, unless anchored, against every segment suffix of it, so
    an unanchored pattern matches a file or directory at any depth.

    Args:
        candidate_path: Path relative to the traversal root, "/" separated
        pattern: Glob pattern
        anchored: Only match the full candidate path

    Returns:
        True if the pattern matches
    """
    if candidate_path == pattern:
        return True

    regex = compile_pattern(pattern)
    if regex is None:
        return False

    if anchored:
        return regex.match(candidate_path) is not None

    for suffix in path_suffixes(candidate_path):
        if regex.match(suffix) is not None:
            return True
    return False
