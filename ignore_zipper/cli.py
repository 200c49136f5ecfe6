#!/usr/bin/env python3
"""
ignore-zipper - ZIP archives that honour .gitignore-style rules

Commands:
- create: archive a directory, skipping ignored files
- extract: unpack an archive without writing outside the target directory
- list: show archive members
- rules: show the ignore rules that apply to a directory
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import ZipperSettings
from .errors import IgnoreZipperError
from .utils import configure_logging, get_logger
from .zipper import ExtractOptions, ZipOptions, Zipper

logger = get_logger(__name__)

RULE_SEPARATOR = '─' * 50


class ZipperCLI:
    """Main ignore-zipper CLI implementation"""

    def __init__(self, settings: Optional[ZipperSettings] = None):
        self._settings = settings

    @property
    def settings(self) -> ZipperSettings:
        """Settings from the environment, read on first use"""
        if self._settings is None:
            self._settings = ZipperSettings.from_env()
        return self._settings

    def build_parser(self) -> argparse.ArgumentParser:
        """Build the command line parser"""
        parser = argparse.ArgumentParser(
            prog='ignore-zipper',
            description='ZIP operations with ignore file support',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self.get_usage_examples()
        )
        parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
        parser.add_argument('--log-level', metavar='LEVEL',
            help='Log level (TRACE, DEBUG, INFO, WARNING, ERROR)')

        subparsers = parser.add_subparsers(dest='command', help='Commands')

        # Create command
        create_parser = subparsers.add_parser('create',
            help='Create a ZIP file with ignore rules applied')
        create_parser.add_argument('source', help='Source directory to zip')
        create_parser.add_argument('output', help='Output ZIP file path')
        create_parser.add_argument('-c', '--compression', type=int, metavar='LEVEL',
            help='Compression level 0-9 (default: 6)')
        self._add_rule_arguments(create_parser)
        create_parser.add_argument('-v', '--verbose', action='store_true',
            help='Verbose output')

        # Extract command
        extract_parser = subparsers.add_parser('extract',
            help='Extract a ZIP file')
        extract_parser.add_argument('input', help='Input ZIP file path')
        extract_parser.add_argument('output', help='Output directory path')
        extract_parser.add_argument('-f', '--force', action='store_true',
            help='Overwrite existing files')
        extract_parser.add_argument('-v', '--verbose', action='store_true',
            help='Verbose output')

        # List command
        list_parser = subparsers.add_parser('list',
            help='List contents of a ZIP file')
        list_parser.add_argument('input', help='Input ZIP file path')

        # Rules command
        rules_parser = subparsers.add_parser('rules',
            help='Show active ignore rules for a directory')
        rules_parser.add_argument('directory', help='Directory to analyze')
        self._add_rule_arguments(rules_parser)
        rules_parser.add_argument('--check', nargs='+', metavar='PATH', default=[],
            help='Report whether these paths (relative to the directory) are ignored')

        return parser

    @staticmethod
    def _add_rule_arguments(parser: argparse.ArgumentParser):
        parser.add_argument('-i', '--ignore-file', nargs='+', metavar='FILE', default=[],
            help='Additional ignore files to use')
        parser.add_argument('-p', '--pattern', nargs='+', metavar='PATTERN', default=[],
            help='Additional ignore patterns')
        parser.add_argument('--ignore-pattern', metavar='GLOB',
            help='Custom pattern for ignore files (e.g., ".*ignore" or ".myignore")')
        parser.add_argument('--no-auto-ignore', dest='auto_ignore', action='store_false',
            default=None, help='Skip automatic loading of .*ignore files')

    def get_usage_examples(self) -> str:
        """Get usage examples for help text"""
        return """
Examples:
  ignore-zipper create ./project project.zip          # Honour .gitignore, .zipignore, .ignore
  ignore-zipper create . out.zip -p "*.log" "tmp/"    # Extra ad-hoc patterns
  ignore-zipper create . out.zip --ignore-pattern ".*ignore" --no-auto-ignore
  ignore-zipper extract project.zip ./restored -f     # Overwrite existing files
  ignore-zipper rules . --check build/out.txt         # Explain a decision

Environment Variables:
  IGNORE_ZIPPER_COMPRESSION_LEVEL   Default compression level (0-9)
  IGNORE_ZIPPER_AUTO_IGNORE         Load .*ignore files automatically (default: true)
  IGNORE_ZIPPER_ANCHORED_PATTERNS   Leading "/" anchors patterns to the root (default: true)
  IGNORE_ZIPPER_LOG_LEVEL           Log level (default: WARNING)
  IGNORE_ZIPPER_LOG_JSON            Emit logs as JSON
"""

    def _zip_options(self, args: argparse.Namespace) -> ZipOptions:
        return ZipOptions(
            compression_level=getattr(args, 'compression', None),
            ignore_files=args.ignore_file,
            custom_patterns=args.pattern,
            ignore_pattern=args.ignore_pattern,
            auto_ignore=args.auto_ignore,
            verbose=getattr(args, 'verbose', False),
        )

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Main entry point"""
        parser = self.build_parser()
        args = parser.parse_args(argv)

        log_level = args.log_level
        if log_level is None and getattr(args, 'verbose', False):
            log_level = 'INFO'
        configure_logging(log_level)

        # Show help if no command
        if not args.command:
            parser.print_help()
            return 0

        # Route to command handlers
        handler = getattr(self, f'cmd_{args.command}')
        try:
            return handler(args)
        except (IgnoreZipperError, OSError) as e:
            logger.debug(f"Command '{args.command}' failed", exc_info=True)
            print(f"❌ Error: {e}", file=sys.stderr)
            return 1

    # Command handlers
    def cmd_create(self, args: argparse.Namespace) -> int:
        """Handle create command"""
        source_path = Path(args.source).resolve()
        output_path = Path(args.output).resolve()

        if not source_path.exists():
            print(f"❌ Error: Source path does not exist: {source_path}", file=sys.stderr)
            return 1
        if not source_path.is_dir():
            print(f"❌ Error: Source must be a directory: {source_path}", file=sys.stderr)
            return 1

        print(f"📦 Creating ZIP: {output_path}")
        print(f"📁 Source: {source_path}")

        zipper = Zipper(source_path, self.settings)
        summary = zipper.create_zip(source_path, output_path, self._zip_options(args))

        print(f"✅ ZIP created successfully: {output_path} ({summary.count} files)")
        return 0

    def cmd_extract(self, args: argparse.Namespace) -> int:
        """Handle extract command"""
        input_path = Path(args.input).resolve()
        output_path = Path(args.output).resolve()

        if not input_path.exists():
            print(f"❌ Error: ZIP file does not exist: {input_path}", file=sys.stderr)
            return 1

        print(f"📦 Extracting ZIP: {input_path}")
        print(f"📁 Output: {output_path}")

        zipper = Zipper(output_path, self.settings)
        summary = zipper.extract_zip(
            input_path, output_path,
            ExtractOptions(overwrite=args.force, verbose=args.verbose)
        )

        if summary.skipped:
            print(f"⚠️  Skipped {len(summary.skipped)} entries")
        print(f"✅ ZIP extracted successfully to: {output_path}")
        return 0

    def cmd_list(self, args: argparse.Namespace) -> int:
        """Handle list command"""
        input_path = Path(args.input).resolve()

        if not input_path.exists():
            print(f"❌ Error: ZIP file does not exist: {input_path}", file=sys.stderr)
            return 1

        zipper = Zipper(input_path.parent, self.settings)
        entries = zipper.list_zip_contents(input_path)

        print(f"Contents of {input_path}:")
        print(RULE_SEPARATOR)
        for entry in entries:
            if entry.endswith('/'):
                print(f"📁 {entry}")
            else:
                print(f"📄 {entry}")
        print(RULE_SEPARATOR)
        print(f"Total entries: {len(entries)}")
        return 0

    def cmd_rules(self, args: argparse.Namespace) -> int:
        """Handle rules command"""
        dir_path = Path(args.directory).resolve()

        if not dir_path.is_dir():
            print(f"❌ Error: Directory does not exist: {dir_path}", file=sys.stderr)
            return 1

        zipper = Zipper(dir_path, self.settings)
        zipper.load_rules(self._zip_options(args))

        rules = zipper.rule_store.rules
        loaded_files = zipper.rule_store.loaded_files

        print(f"Ignore rules for: {dir_path}")
        print(RULE_SEPARATOR)

        if loaded_files:
            print(f"📁 Loaded ignore files: {', '.join(loaded_files)}")
            print(RULE_SEPARATOR)

        if not rules:
            print("No ignore rules found")
        else:
            for rule in rules:
                prefix = '!' if rule.negate else '-'
                suffix = ''
                if rule.anchored:
                    suffix += ' (anchored)'
                if rule.directory_only:
                    suffix += ' (directories only)'
                print(f"{prefix} {rule.pattern}{suffix}")

        print(RULE_SEPARATOR)
        print(f"Total rules: {len(rules)}")

        for check_path in args.check:
            candidate = dir_path / check_path
            result = zipper.resolver.match_path(candidate, candidate.is_dir())
            verdict = 'ignored' if result.should_ignore else 'kept'
            reason = f" by {result.matched_rule}" if result.matched_rule else ''
            print(f"🔍 {check_path}: {verdict}{reason}")

        return 0


def main():
    """Main entry point"""
    cli = ZipperCLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()
