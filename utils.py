"""
Utility functions shared across the cloud commands.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from tabulate import tabulate

from errors import ValidationError

logger = logging.getLogger(__name__)

# SDK loggers that drown out command output unless debugging
NOISY_LOGGERS = ['azure', 'boto3', 'botocore', 'google', 'urllib3']


def parse_log_level(level: str) -> int:
    """Map a log level name to a logging constant, falling back to INFO."""
    if not isinstance(level, str):
        return logging.INFO
    log_level = logging.getLevelName(level.strip().upper())
    if not isinstance(log_level, int):
        return logging.INFO
    return log_level


def setup_logging(level: str = "info") -> int:
    """
    Configure logging for the application.

    Args:
        level: Logging level name (debug, info, warning, error, critical).
            Unknown names fall back to INFO.

    Returns:
        int: The logging level that was applied
    """
    log_level = parse_log_level(level)

    # Configure root logger
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        force=True
    )

    # Let SDK chatter through only when debugging
    sdk_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)

    return log_level


def is_debug() -> bool:
    """True when the root logger is configured for debug output."""
    return logging.getLogger().isEnabledFor(logging.DEBUG)


def print_table(rows: list[list[Any]], headers: list[str], empty_message: str) -> None:
    """Print rows in a table format, or log empty_message when there are none."""
    if not rows:
        logger.info(empty_message)
        return

    print(tabulate(rows, headers=headers, tablefmt="github"))
    print()


def read_yaml_as_json(filename: str) -> Any:
    """
    Read a YAML file and return its content after a JSON round trip.

    The JSON pass guarantees the result only holds JSON types (YAML dates,
    sets and the like are rejected), so it can be fed to models that expect
    a JSON document.

    Args:
        filename: Path to the YAML file

    Returns:
        The decoded document

    Raises:
        ValidationError: If the file cannot be read or decoded
    """
    file_path = Path(filename).expanduser()
    try:
        content = file_path.read_text()
    except OSError as e:
        raise ValidationError(f"failed to read file {file_path}: {e}") from e

    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValidationError(
            f"failed to decode yaml file {file_path} into a valid map: {e}") from e

    try:
        return json.loads(json.dumps(document))
    except (TypeError, ValueError) as e:
        raise ValidationError(
            f"failed to encode yaml file {file_path} as json: {e}") from e


def tags_from_list(values: list[str]) -> list[dict[str, str]]:
    """
    Build AWS style tags from a flat key, value list.

    ['environment', 'development', 'team', 'net'] becomes
    [{'Key': 'environment', 'Value': 'development'}, {'Key': 'team', 'Value': 'net'}].
    A trailing key without a value is dropped.
    """
    tags = []
    for i in range(0, len(values), 2):
        if i + 1 >= len(values):
            logger.warning(f"Ignoring tag key '{values[i]}' without a value")
            break
        tags.append({'Key': values[i], 'Value': values[i + 1]})
    return tags


def format_tags(tags_input) -> str:
    """
    Render tags as 'key: value' pairs.

    Args:
        tags_input: Can be:
            - AWS: list of {'Key': str, 'Value': str} dicts
            - Azure/GCP: dict with string keys and values
            - None/empty
    """
    if not tags_input:
        return ''

    pairs = []
    if isinstance(tags_input, list):
        for tag in tags_input:
            if isinstance(tag, dict) and 'Key' in tag and 'Value' in tag:
                pairs.append(f"{tag['Key']}: {tag['Value']}")
    elif isinstance(tags_input, dict):
        for key, value in tags_input.items():
            pairs.append(f"{key}: {value}")

    return ', '.join(pairs)
