"""
Command-line interface for revstamp.

Main entry point that ties configuration, VCS analysis and version
formatting together. The resolved version goes to stdout, all log output
goes to stderr so the command can be used in scripts.
"""

import sys
import argparse
from datetime import timezone
from loguru import logger
from rich.console import Console

from .api import get_version
from .config import VALID_LOG_LEVELS, load_config
from .exceptions import RevisionError
from .logging_config import LoguruLogger, setup_logging
from .providers import get_vcs_providers
from .time_scheme import decode_value

# Shared console for log output, kept off stdout
console = Console(stderr=True)


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog='revstamp',
        description='Print a version string derived from the Git or Subversion working directory'
    )

    # Working directory
    parser.add_argument('--project-dir', help='Directory to analyse (default: current directory)')
    parser.add_argument('--require', dest='required_vcs', help='Fail unless this VCS is used: git or svn')

    # Version format
    parser.add_argument('--format', dest='revision_format',
                        help='Revision format, e.g. "{semvertag}+{chash:7}{!:-mod}" (default: based on the revision data)')
    parser.add_argument('--tag-match', help='Glob pattern for tags to consider (default: v[0-9]*)')
    parser.add_argument('--remove-tag-v', action=argparse.BooleanOptionalAction, default=None,
                        help='Remove a leading "v" before a digit from tag names (default: true)')
    parser.add_argument('--copyright', help='Copyright text to resolve, e.g. "© {copyright:2015-} Example Ltd."')

    # Build
    parser.add_argument('--configuration', dest='configuration_name', help='Build configuration name, e.g. Release')
    parser.add_argument('--error-on-modified', dest='error_on_modified_pattern',
                        help='Fail if the working copy is modified and this regex matches the configuration name')
    parser.add_argument('--build-time', help='Build time in ISO 8601 format (default: now)')
    parser.add_argument('--timeout', dest='command_timeout', type=float,
                        help='Seconds to wait for each VCS command (default: 1)')

    # Output
    output = parser.add_mutually_exclusive_group()
    output.add_argument('--short', action='store_true', help='Print the dotted-numeric version only')
    output.add_argument('--copyright-only', action='store_true', help='Print the resolved copyright text only')
    output.add_argument('--all', action='store_true', help='Print version, informational version and copyright')
    output.add_argument('--decode', nargs=2, metavar=('SCHEME', 'VALUE'),
                        help='Decode a time-based version value, e.g. --decode "{c:28:20m:2020}" 1x4d')
    output.add_argument('--list-providers', action='store_true', help='List VCS providers and exit')

    # Logging
    parser.add_argument('--log-level', type=str.upper, choices=VALID_LOG_LEVELS, help='Logging level (default: INFO)')

    return parser.parse_args(argv)


def list_providers() -> None:
    """List the VCS providers and whether their tools are installed."""
    log = LoguruLogger()
    providers = get_vcs_providers(log)
    logger.info(f'🔍 {len(providers)} VCS provider(s):')
    for provider in providers:
        status = '✅ available' if provider.check_environment() else '❌ not available'
        logger.info(f'  {provider.name:<4} {status}')


def decode(scheme: str, value: str) -> int:
    """Print the time encoded in a version value."""
    try:
        time = decode_value(scheme, value)
    except RevisionError as e:
        logger.error(f'❌ {e}')
        return 1
    print(f'{time.astimezone(timezone.utc):%Y-%m-%d %H:%M:%S} UTC')
    print(f'{time.astimezone():%Y-%m-%d %H:%M:%S %z} local')
    return 0


def setup_application(argv=None) -> tuple:
    """Set up logging, parse arguments, and load the configuration."""
    # Set up logging with default level first
    setup_logging(console=console)

    # Parse command-line arguments
    args = parse_arguments(argv)

    # Apply log level from arguments if provided
    if args.log_level:
        setup_logging(args.log_level, console=console)

    if args.list_providers or args.decode:
        return args, None

    # Load and validate configuration (CLI args take precedence over env vars)
    config = load_config(args)

    # Exit if configuration validation failed
    if config is None:
        sys.exit(1)

    # Apply the log level from the environment when no --log-level was given
    setup_logging(config.log_level, console=console)

    return args, config


def run(args, config) -> int:
    """Resolve and print the version for a validated configuration."""
    try:
        info = get_version(
            project_dir=config.project_dir,
            required_vcs=config.required_vcs or None,
            revision_format=config.revision_format or None,
            tag_match=config.tag_match,
            remove_tag_v=config.remove_tag_v,
            copyright=config.copyright,
            build_time=config.build_time,
            configuration_name=config.configuration_name or None,
            error_on_modified_pattern=config.error_on_modified_pattern or None,
            log=LoguruLogger(),
            timeout=config.command_timeout,
        )

        # The short version is only resolved by the modes that print it
        if args.short:
            output = [info.version]
        elif args.copyright_only:
            output = [info.copyright]
        elif args.all:
            output = [
                f'Version: {info.version}',
                f'InformationalVersion: {info.informational_version}',
                f'Copyright: {info.copyright}',
            ]
        else:
            output = [info.informational_version]
    except RevisionError as e:
        logger.error(f'❌ {e}')
        return 1

    for line in output:
        print(line)
    return 0


def main(argv=None) -> None:
    """Main entry point for the application."""
    args, config = setup_application(argv)

    if args.list_providers:
        list_providers()
        return
    if args.decode:
        sys.exit(decode(*args.decode))

    exit_code = run(args, config)
    if exit_code:
        sys.exit(exit_code)


if __name__ == '__main__':
    main()
