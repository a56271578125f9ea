"""
Resource commands for Azure resource groups.

Usage example:
  cloud resources azure resource-groups add -c ID -S SECRET -s SUB -t TENANT -n my-rg -L EastUS
"""

import logging

import validate
from azuresvc.resource_group import ResourceGroupClient
from shared import (add_azure_flags, add_flag, add_subcommands, azure_auth,
                    new_command)

logger = logging.getLogger(__name__)

RESOURCE_GROUP_TIMEOUT = 30


def create_resource_group(settings) -> None:
    validate.not_empty(settings, ['name', 'location'])
    client = ResourceGroupClient(azure_auth(settings), timeout=RESOURCE_GROUP_TIMEOUT)

    name = settings.get_str('name')
    logger.info("creating resource group")
    client.create_resource_group(name, settings.get_str('location').lower())
    logger.info(f"resource group '{name}' created")


def register(subparsers) -> None:
    """Add the resources command tree."""
    resources = new_command(subparsers, 'resources', 'Control resources in public clouds')
    providers = add_subcommands(resources)

    azure = new_command(providers, 'azure', "Control resources in azure's public clouds")
    azure_commands = add_subcommands(azure)

    groups = new_command(azure_commands, 'resource-groups',
                         "control resource groups in azure's public clouds")
    group_commands = add_subcommands(groups)
    add = new_command(group_commands, 'add', "add resource group in azure's public clouds",
                      create_resource_group)
    add_azure_flags(add)
    add_flag(add, '-n', '--name', help='name of resource group')
    add_flag(add, '-L', '--location', help='location/region of resource group')
