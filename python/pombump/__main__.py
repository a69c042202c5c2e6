"""Main CLI entry point for pombump."""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .commands.analyze import run_analyze
from .maven_central import MAVEN_CENTRAL_URL
from .parsers import PomParseError

logger = logging.getLogger(__name__)

ANALYZE_EXAMPLES = """examples:
  # Analyze a POM and show report
  pombump analyze pom.xml

  # Analyze with proposed patches to see recommendations
  pombump analyze pom.xml --patches "io.netty@netty-codec-http@4.1.94.Final"

  # Generate patch files based on analysis (merges into existing files)
  pombump analyze pom.xml --patches "io.netty@netty-codec-http@4.1.94.Final" \\
    --output-deps pombump-deps.yaml --output-properties pombump-properties.yaml

  # Search for properties in the whole project tree
  pombump analyze pom.xml --search-properties --patches "org.assertj@assertj-core@3.25.0"
"""


def setup_logging(verbose: bool = False, log_level: Optional[str] = None):
    """Configure logging based on verbosity flags."""
    if log_level:
        level = getattr(logging, log_level.upper(), logging.WARNING)
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s'
    )


def handle_analyze(args):
    """Handle the 'analyze' subcommand."""
    setup_logging(args.verbose, args.loglevel)

    logger.info(f"Analyzing {args.pom_file} (search properties: {args.search_properties})")

    try:
        return run_analyze(
            args.pom_file,
            patches=args.patches,
            patch_file=args.patch_file,
            output_format=args.output_format,
            output_deps=args.output_deps,
            output_properties=args.output_properties,
            search_properties=args.search_properties,
            remote_parents=args.remote_parents,
            maven_repo=args.maven_repo,
        )
    except PomParseError as e:
        logger.error(f"Error analyzing project: {e}")
        print(f"Error: failed to analyze project: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.error(f"Error reading or writing files: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='pombump',
        description='Recommend consistent dependency version bumps for Maven POM files'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Subcommands')

    analyze_parser = subparsers.add_parser(
        'analyze',
        help='Analyze a POM file to understand dependency structure',
        description='Analyze how dependencies are defined in a POM and decide whether patches '
                    'should be direct dependency edits, property updates or BOM updates.',
        epilog=ANALYZE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    analyze_parser.add_argument('pom_file', help='POM file to analyze (path or http(s) URL)')
    analyze_parser.add_argument('--patches', default='',
                                help='Space-separated list of patches to analyze (groupID@artifactID@version)')
    analyze_parser.add_argument('--patch-file', default='',
                                help='YAML file containing patches to analyze')
    analyze_parser.add_argument('--output', dest='output_format', default='human',
                                choices=['human', 'json', 'yaml'],
                                help='Output format (human, json, yaml). Default: human')
    analyze_parser.add_argument('--output-deps', default='',
                                help='Write recommended dependency patches to this file')
    analyze_parser.add_argument('--output-properties', default='',
                                help='Write recommended property patches to this file')
    analyze_parser.add_argument('--search-properties', action='store_true',
                                help='Search for properties in parent and module POM files')
    analyze_parser.add_argument('--remote-parents', action='store_true',
                                help='Download parent POMs missing locally when searching properties')
    analyze_parser.add_argument('--maven-repo', default=MAVEN_CENTRAL_URL,
                                help=f'Maven repository for --remote-parents. Default: {MAVEN_CENTRAL_URL}')
    analyze_parser.add_argument('-v', '--verbose', action='store_true',
                                help='Verbose output')
    analyze_parser.add_argument('--loglevel',
                                choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                                help='Set log level')
    analyze_parser.set_defaults(func=handle_analyze)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Execute command
    try:
        return args.func(args)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
