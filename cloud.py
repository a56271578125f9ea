#!/usr/bin/env python3
"""
Cloud Actions - create, list and delete network, identity and compute
resources in AWS, Azure and GCP.

Command tree:
  cloud compute   azure create-container-instance | google create-cluster
  cloud identity  azure users add | applications add, add-credentials | roles list
  cloud network   aws vpc create, delete, list, create-subnet, list-subnets
                  aws regions az-list | azure network-profile add, list
  cloud peering   azure create, list | google create, list
  cloud resources azure resource-groups add

Every flag may also come from a CLOUD_* environment variable (CLOUD_CLIENT_ID
for --client-id) or from the YAML config file (--config, CLOUD_CONFIG or
~/.cloud.yaml).

Usage examples:
  python cloud.py network aws vpc list -p default -r us-east-1
  python cloud.py --loglevel debug resources azure resource-groups add -n my-rg -L eastus
"""

import argparse
import logging
import sys

import compute
import identity
import network
import peering
import resources
from config import Settings, load_config, resolve_config_path
from errors import CloudActionsError
from shared import add_global_flags, add_subcommands, print_help_handler
from utils import setup_logging

logger = logging.getLogger(__name__)

VERSION = "0.1.0"

ROOT_DEFAULTS = {'loglevel': 'info'}

COMMAND_MODULES = [compute, identity, network, peering, resources]


def build_parser() -> argparse.ArgumentParser:
    """Build the full command tree."""
    parser = argparse.ArgumentParser(
        prog='cloud',
        description='Control resources in public clouds (aws, azure, google)',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    add_global_flags(parser, config_default=None)
    parser.add_argument('--version', action='version', version=f'%(prog)s {VERSION}')
    parser.set_defaults(handler=print_help_handler(parser), flag_defaults={})

    subparsers = add_subcommands(parser)
    for module in COMMAND_MODULES:
        module.register(subparsers)
    return parser


def main(argv: list[str] = None) -> int:
    """Parse the command line, run the selected command and return the exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    handler = args.handler
    defaults = {**ROOT_DEFAULTS, **args.flag_defaults}
    config_path = args.config
    # Only flag values are left for Settings
    for name in ('handler', 'flag_defaults', 'config'):
        delattr(args, name)

    try:
        config = load_config(resolve_config_path(config_path))
    except CloudActionsError as e:
        setup_logging()
        logger.critical(f"failure running cloud command: {e}")
        return 1

    settings = Settings(args, defaults=defaults, config=config)
    setup_logging(settings.get_str('loglevel'))
    logger.info(f"running cloud version: {VERSION}")

    try:
        handler(settings)
    except CloudActionsError as e:
        logger.critical(f"failure running cloud command: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
