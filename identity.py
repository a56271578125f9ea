"""
Identity commands for Azure: applications, their credentials, service
principals (users) and role definitions.

Usage examples:
  cloud identity azure applications add -c ID -S SECRET -t TENANT -d my-app
  cloud identity azure applications add-credentials -c ID -S SECRET -t TENANT -a APP_ID -d my-app
  cloud identity azure users add -c ID -S SECRET -t TENANT -a APP_ID -d my-app
  cloud identity azure roles list -c ID -S SECRET -s SUB -t TENANT -r my-rg -v my-vnet
"""

import logging

import validate
from azuresvc.identity import ApplicationConfig, IdentityClient
from shared import (add_azure_flags, add_flag, add_subcommands, azure_auth,
                    new_command)
from utils import print_table

logger = logging.getLogger(__name__)

IDENTITY_TIMEOUT = 30
DEFAULT_HOMEPAGE = 'https://microsoft.com'


def new_client(settings, require_subscription: bool = False) -> IdentityClient:
    return IdentityClient(
        azure_auth(settings, require_subscription=require_subscription),
        timeout=IDENTITY_TIMEOUT)


def create_application(settings) -> None:
    validate.not_empty(settings, ['display-name'])
    client = new_client(settings)

    logger.info("creating application")
    app = client.create_ad_application(ApplicationConfig(
        available_to_other_tenants=settings.get_bool('multi-tenant'),
        display_name=settings.get_str('display-name'),
        home_page=settings.get_str('homepage'),
        identifier_uris=settings.get_list('identifier-uris')
    ))
    logger.info(f"application id {app.get('appId')} created")


def update_application_credentials(settings) -> None:
    validate.not_empty(settings, ['app-id', 'display-name'])
    client = new_client(settings)

    logger.info("updating application credentials")
    app_id = settings.get_str('app-id')
    password = client.create_application_credentials(ApplicationConfig(
        app_id=app_id,
        display_name=settings.get_str('display-name')
    ))
    logger.info(f"password of {password} assigned to application id {app_id}")


def create_user(settings) -> None:
    """Create a service principal for an application."""
    validate.not_empty(settings, ['app-id', 'display-name'])
    client = new_client(settings)

    logger.info("creating user")
    client.create_service_principal(ApplicationConfig(
        app_id=settings.get_str('app-id'),
        display_name=settings.get_str('display-name')
    ))
    logger.info(f"service principal created for app '{settings.get_str('display-name')}'")


def list_roles(settings) -> None:
    validate.not_empty(settings, ['resource-group', 'vnet-name'])
    client = new_client(settings, require_subscription=True)

    logger.info("listing roles")
    roles = client.list_role_definitions(
        settings.get_str('resource-group'), settings.get_str('vnet-name'))

    rows = [[role.name, role.role_name, role.description] for role in roles]
    print_table(rows, ["Name", "Role Name", "Description"], "No role definitions found.")


def register(subparsers) -> None:
    """Add the identity command tree."""
    identity = new_command(subparsers, 'identity', 'Control identity in public clouds')
    providers = add_subcommands(identity)

    azure = new_command(providers, 'azure', "Control identity in azure's public clouds")
    azure_commands = add_subcommands(azure)

    users = new_command(azure_commands, 'users', "control users in azure's public clouds")
    user_commands = add_subcommands(users)
    user_add = new_command(user_commands, 'add', "add users in azure's public clouds", create_user)
    add_azure_flags(user_add)
    add_flag(user_add, '-a', '--app-id', help='application id to which to add this user')
    add_flag(user_add, '-d', '--display-name', help='display name of application')

    applications = new_command(
        azure_commands, 'applications', "control applications in azure's public clouds")
    application_commands = add_subcommands(applications)

    application_add = new_command(
        application_commands, 'add', "add applications in azure's public clouds", create_application)
    add_azure_flags(application_add)
    add_flag(application_add, '-m', '--multi-tenant', default=True, kind=bool,
             help='is this app multi-tenant?')
    add_flag(application_add, '-d', '--display-name', help='display name of application')
    add_flag(application_add, '-H', '--homepage', default=DEFAULT_HOMEPAGE,
             help='home page of application')
    add_flag(application_add, '-i', '--identifier-uris', kind=list,
             help='list of identifier uris for the application')

    add_credentials = new_command(
        application_commands, 'add-credentials',
        "add credentials to an application in azure's public clouds", update_application_credentials)
    add_azure_flags(add_credentials)
    add_flag(add_credentials, '-a', '--app-id', help='application id to add credentials')
    add_flag(add_credentials, '-d', '--display-name', help='display name of application')

    roles = new_command(azure_commands, 'roles', "control roles in azure's public clouds")
    role_commands = add_subcommands(roles)
    roles_list = new_command(role_commands, 'list', "list roles in azure's public clouds", list_roles)
    add_azure_flags(roles_list)
    add_flag(roles_list, '-r', '--resource-group', help='resource group to use as scope')
    add_flag(roles_list, '-v', '--vnet-name', help='vnet name to use as scope')
