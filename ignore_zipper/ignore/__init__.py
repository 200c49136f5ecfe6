"""
Ignore rule processing for ignore-zipper

This module provides the layered, gitignore-style exclusion system:
- Glob matching of one pattern at any path depth
- An ordered rule store fed by several ignore files and ad-hoc patterns
- Last-match-wins resolution with negation and directory-only rules
"""

from .constants import DEFAULT_IGNORE_FILES
from .pattern_matcher import matches, validate_pattern
from .rule_store import (
    IgnoreRule,
    LoadResult,
    LoadStatus,
    PatternWarning,
    RuleStore,
    parse_line,
)
from .resolver import IgnoreResolver, MatchResult

__all__ = [
    'DEFAULT_IGNORE_FILES',
    'matches',
    'validate_pattern',
    'IgnoreRule',
    'LoadResult',
    'LoadStatus',
    'PatternWarning',
    'RuleStore',
    'parse_line',
    'IgnoreResolver',
    'MatchResult',
]
