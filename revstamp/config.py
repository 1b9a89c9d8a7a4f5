"""
Configuration management for revstamp.

Handles environment variable loading, validation, and provides a centralized
configuration object for the command line.
"""

import os
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from dotenv import load_dotenv
from loguru import logger

from .api import DEFAULT_TAG_MATCH
from .process import DEFAULT_COMMAND_TIMEOUT
from .providers import PROVIDER_NAMES

# Load environment variables from .env file
load_dotenv()

VALID_LOG_LEVELS = ['RAW', 'TRACE', 'DEBUG', 'INFO', 'SUCCESS', 'WARNING', 'ERROR', 'CRITICAL']

MAX_COMMAND_TIMEOUT = 60.0


def get_config_value(cli_args, field_name: str, env_key: str, default, value_type: type = str):
    """
    Get configuration value with proper precedence: CLI args > env vars > defaults.

    Args:
        cli_args: CLI arguments object or None
        field_name: Name of the CLI argument field
        env_key: Environment variable key
        default: Default value if neither CLI nor env var is set
        value_type: Type to convert the value to (str, int, float, bool)

    Returns:
        The configuration value converted to the specified type
    """
    cli_value = getattr(cli_args, field_name, None) if cli_args else None
    if cli_value is not None:
        return cli_value

    env_value = os.environ.get(env_key, '')

    # Handle boolean conversion specially
    if value_type == bool:
        if env_value.strip().lower() in ('true', '1', 'yes'):
            return True
        elif env_value.strip().lower() in ('false', '0', 'no'):
            return False
        return default

    # Handle other types
    if not env_value:
        return default

    try:
        return value_type(env_value)
    except (ValueError, TypeError):
        return default


def get_config_value_str(cli_args, field_name: str, env_key: str, default: str = '') -> str:
    """Get string configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, str)


def get_config_value_float(cli_args, field_name: str, env_key: str, default: float = 0.0) -> float:
    """Get float configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, float)


def get_config_value_bool(cli_args, field_name: str, env_key: str, default: bool = False) -> bool:
    """Get boolean configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, bool)


@dataclass
class Config:
    """Configuration object containing all settings of one version run."""

    # Working directory
    project_dir: str
    required_vcs: str

    # Version format
    revision_format: str
    tag_match: str
    remove_tag_v: bool
    copyright: str

    # Build
    configuration_name: str
    error_on_modified_pattern: str
    build_time: datetime

    # VCS commands
    command_timeout: float

    # Logging
    log_level: str


def parse_build_time(value: str) -> Optional[datetime]:
    """
    Parse an ISO 8601 build time.

    Values without offset are taken as local time.

    Returns:
        datetime: Timezone-aware build time, or None if the value cannot be parsed
    """
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def _validate_version_config(required_vcs: str, tag_match: str, error_on_modified_pattern: str,
                             validation_errors: list) -> None:
    """
    Validate VCS selection and patterns.

    Args:
        required_vcs: Required VCS name or empty
        tag_match: Tag glob pattern
        error_on_modified_pattern: Regex matched against the configuration name
        validation_errors: List to append validation errors
    """
    if required_vcs and required_vcs.lower() not in PROVIDER_NAMES:
        validation_errors.append(
            f'REVSTAMP_REQUIRED_VCS must be one of {list(PROVIDER_NAMES)} (got: {required_vcs})'
        )

    if tag_match != tag_match.strip():
        validation_errors.append(f'REVSTAMP_TAG_MATCH must not have surrounding whitespace (got: "{tag_match}")')

    if error_on_modified_pattern:
        try:
            re.compile(error_on_modified_pattern)
        except re.error as e:
            validation_errors.append(
                f'REVSTAMP_ERROR_ON_MODIFIED is not a valid regular expression ({e}) (got: {error_on_modified_pattern})'
            )


def _validate_paths(project_dir: str, validation_errors: list) -> None:
    """
    Validate the project directory.

    Args:
        project_dir: Directory to analyse
        validation_errors: List to append validation errors
    """
    if not os.path.exists(project_dir):
        validation_errors.append(f'REVSTAMP_PROJECT_DIR ({project_dir}) does not exist')
    elif not os.path.isdir(project_dir):
        validation_errors.append(f'REVSTAMP_PROJECT_DIR ({project_dir}) is not a directory')


def load_config(cli_args=None) -> Optional[Config]:
    """
    Load and validate configuration from CLI arguments and environment variables.
    CLI arguments take precedence over environment variables.

    Args:
        cli_args: Parsed CLI arguments or None

    Returns:
        Config: Validated configuration object, or None if validation failed
    """
    project_dir = get_config_value_str(cli_args, 'project_dir', 'REVSTAMP_PROJECT_DIR', '') or os.getcwd()
    required_vcs = get_config_value_str(cli_args, 'required_vcs', 'REVSTAMP_REQUIRED_VCS', '').strip()

    revision_format = get_config_value_str(cli_args, 'revision_format', 'REVSTAMP_FORMAT', '')
    tag_match = get_config_value_str(cli_args, 'tag_match', 'REVSTAMP_TAG_MATCH', DEFAULT_TAG_MATCH)
    remove_tag_v = get_config_value_bool(cli_args, 'remove_tag_v', 'REVSTAMP_REMOVE_TAG_V', True)
    copyright = get_config_value_str(cli_args, 'copyright', 'REVSTAMP_COPYRIGHT', '')

    configuration_name = get_config_value_str(cli_args, 'configuration_name', 'REVSTAMP_CONFIGURATION', '')
    error_on_modified_pattern = get_config_value_str(
        cli_args, 'error_on_modified_pattern', 'REVSTAMP_ERROR_ON_MODIFIED', ''
    )
    build_time_text = get_config_value_str(cli_args, 'build_time', 'REVSTAMP_BUILD_TIME', '')

    command_timeout = get_config_value_float(
        cli_args, 'command_timeout', 'REVSTAMP_COMMAND_TIMEOUT', DEFAULT_COMMAND_TIMEOUT
    )

    # Handle log_level (case insensitive)
    log_level = get_config_value_str(cli_args, 'log_level', 'LOG_LEVEL', 'INFO').upper()

    validation_errors = []

    # Validate log level
    if log_level not in VALID_LOG_LEVELS:
        validation_errors.append(f'LOG_LEVEL must be one of {VALID_LOG_LEVELS} (got: {log_level})')

    if command_timeout <= 0 or command_timeout > MAX_COMMAND_TIMEOUT:
        validation_errors.append(
            f'REVSTAMP_COMMAND_TIMEOUT must be between 0-{MAX_COMMAND_TIMEOUT:g} seconds (got: {command_timeout})'
        )

    build_time = datetime.now().astimezone()
    if build_time_text:
        parsed = parse_build_time(build_time_text)
        if parsed is None:
            validation_errors.append(f'REVSTAMP_BUILD_TIME must be an ISO 8601 date and time (got: {build_time_text})')
        else:
            build_time = parsed

    _validate_version_config(required_vcs, tag_match, error_on_modified_pattern, validation_errors)
    _validate_paths(project_dir, validation_errors)

    # Handle validation errors (standard error messages)
    if validation_errors:
        logger.error('❌ Configuration Error:')
        for i, error_msg in enumerate(validation_errors, 1):
            logger.error(f'   {i}. {error_msg}')
        return None  # Return None to indicate validation failure

    config = Config(
        project_dir=os.path.abspath(project_dir),
        required_vcs=required_vcs,
        revision_format=revision_format,
        tag_match=tag_match,
        remove_tag_v=remove_tag_v,
        copyright=copyright,
        configuration_name=configuration_name,
        error_on_modified_pattern=error_on_modified_pattern,
        build_time=build_time,
        command_timeout=command_timeout,
        log_level=log_level,
    )

    # Output debug information
    logger.debug(f'REVSTAMP_PROJECT_DIR = {config.project_dir}')
    logger.debug(f'REVSTAMP_REQUIRED_VCS = {config.required_vcs}')
    logger.debug(f'REVSTAMP_FORMAT = {config.revision_format}')
    logger.debug(f'REVSTAMP_TAG_MATCH = {config.tag_match}')
    logger.debug(f'REVSTAMP_REMOVE_TAG_V = {config.remove_tag_v}')
    logger.debug(f'REVSTAMP_CONFIGURATION = {config.configuration_name}')
    logger.debug(f'REVSTAMP_ERROR_ON_MODIFIED = {config.error_on_modified_pattern}')
    logger.debug(f'REVSTAMP_BUILD_TIME = {config.build_time.isoformat()}')
    logger.debug(f'REVSTAMP_COMMAND_TIMEOUT = {config.command_timeout}')

    return config
