"""
Ignore resolver: evaluates the ordered rule set for a candidate path
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .pattern_matcher import matches
from .rule_store import IgnoreRule, RuleStore
from ..utils import get_logger

logger = get_logger(__name__)


@dataclass
class MatchResult:
    """Result of matching a path against ignore rules"""
    should_ignore: bool
    matched_rule: Optional[IgnoreRule] = None  # Last rule that matched, if any


class IgnoreResolver:
    """
    Decides whether a path is ignored, last matching rule wins

    The resolver holds no state of its own beyond the rule store it reads, so
    repeated calls with the same rules and path give the same answer.
    """

    def __init__(self, base_path: Union[str, Path],
                 rule_store: Optional[RuleStore] = None,
                 anchored_patterns: bool = True):
        """
        Initialize resolver

        Args:
            base_path: Traversal root; candidate paths are made relative to it
            rule_store: Rules to evaluate (an empty store if omitted)
            anchored_patterns: Match "/pattern" rules only against the full
                relative path. When False they match at any depth.
        """
        self.base_path = Path(base_path).resolve()
        self.rule_store = rule_store if rule_store is not None else RuleStore()
        self.anchored_patterns = anchored_patterns

    def relative_path(self, candidate_path: Union[str, Path]) -> Optional[str]:
        """
        Get the forward-slash path of a candidate relative to the root

        Args:
            candidate_path: Absolute path, or path relative to the root

        Returns:
            Normalized relative path, or None if the candidate lies outside
            the root (or is the root itself)
        """
        path = Path(candidate_path)
        if not path.is_absolute():
            path = self.base_path / path

        relative = os.path.relpath(path, self.base_path)
        if relative == os.curdir or relative == os.pardir or relative.startswith(os.pardir + os.sep):
            return None
        return Path(relative).as_posix()

    def match_path(self, candidate_path: Union[str, Path],
                   is_directory: bool = False) -> MatchResult:
        """
        Evaluate every rule against a path

        Args:
            candidate_path: Path to check (absolute or relative to the root)
            is_directory: Whether the path is a directory

        Returns:
            MatchResult with the decision and the rule that made it
        """
        relative = self.relative_path(candidate_path)
        if relative is None:
            return MatchResult(should_ignore=False)

        result = MatchResult(should_ignore=False)

        # All rules are checked, later matches override earlier ones
        for rule in self.rule_store:
            if rule.directory_only and not is_directory:
                continue

            anchored = rule.anchored and self.anchored_patterns
            if matches(relative, rule.pattern, anchored=anchored):
                result.should_ignore = not rule.negate
                result.matched_rule = rule

        if result.matched_rule is not None:
            logger.trace(
                f"Ignore check for {relative}: {result.should_ignore} "
                f"(matched: {result.matched_rule} from {result.matched_rule.source or 'pattern'})"
            )

        return result

    def should_ignore(self, candidate_path: Union[str, Path],
                      is_directory: bool = False) -> bool:
        """
        Check if a path should be ignored

        Args:
            candidate_path: Path to check (absolute or relative to the root)
            is_directory: Whether the path is a directory

        Returns:
            True if path should be ignored, False otherwise
        """
        return self.match_path(candidate_path, is_directory).should_ignore
