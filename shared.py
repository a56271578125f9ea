"""
Helpers shared by the command modules: command tree construction, flag
registration and the per-provider credential flags.

Flags are registered with argparse.SUPPRESS so a parsed namespace only holds
values typed on the command line; each command keeps its flag defaults in a
'flag_defaults' dict that config.Settings consults last.
"""

import argparse

import validate
from azuresvc.session import AuthConfig

AZURE_AUTH_KEYS = ['client-id', 'client-secret', 'tenant-id']


def comma_list(value: str) -> list[str]:
    """Parse 'a,b,c' into ['a', 'b', 'c']."""
    return [item.strip() for item in value.split(',') if item.strip()]


def print_help_handler(parser: argparse.ArgumentParser):
    def handler(settings) -> None:
        parser.print_help()
    return handler


def add_subcommands(parser: argparse.ArgumentParser):
    return parser.add_subparsers(title='commands', metavar='<command>')


def add_global_flags(parser: argparse.ArgumentParser, config_default=argparse.SUPPRESS) -> None:
    """Flags accepted by every command, before or after the subcommand name."""
    parser.add_argument('-l', '--loglevel', default=argparse.SUPPRESS,
                        help='log level (debug, info, warning, error, critical) (default: info)')
    parser.add_argument('--config', default=config_default,
                        help='config file (default: ~/.cloud.yaml)')


def new_command(subparsers, name: str, help_text: str, handler=None) -> argparse.ArgumentParser:
    """
    Add a command to a subparsers group.

    Args:
        subparsers: Group returned by add_subcommands
        name: Command name
        help_text: One line description
        handler: Callable taking config.Settings. Commands without one print
            their help, like a command group.
    """
    parser = subparsers.add_parser(name, help=help_text, description=help_text)
    add_global_flags(parser)
    parser.set_defaults(handler=handler or print_help_handler(parser), flag_defaults={})
    return parser


def add_flag(parser: argparse.ArgumentParser, *names: str, default=None, help: str = '',
             kind=str) -> None:
    """
    Register a flag and its default on a command.

    Args:
        parser: Command parser created by new_command
        names: Option strings, e.g. '-n', '--name'
        default: Value used when neither flag, environment nor config file set it
        help: Help text
        kind: str, bool or list
    """
    if default is None:
        default = {bool: False, list: []}.get(kind, '')

    help_text = help
    if default not in ('', [], None):
        shown = ','.join(default) if isinstance(default, list) else default
        help_text = f"{help} (default: {shown})"

    kwargs = {'default': argparse.SUPPRESS, 'help': help_text}
    if kind is bool:
        kwargs['action'] = argparse.BooleanOptionalAction
    elif kind is list:
        kwargs.update(action='extend', type=comma_list)

    action = parser.add_argument(*names, **kwargs)
    parser.get_default('flag_defaults')[action.dest] = default


def add_aws_flags(parser: argparse.ArgumentParser) -> None:
    add_flag(parser, '-p', '--profile', help='aws profile to use')
    add_flag(parser, '-r', '--region', help='aws region')


def add_azure_flags(parser: argparse.ArgumentParser) -> None:
    add_flag(parser, '-c', '--client-id', help='azure client id')
    add_flag(parser, '-S', '--client-secret', help='azure client secret')
    add_flag(parser, '-s', '--subscription-id', help='azure subscription id')
    add_flag(parser, '-t', '--tenant-id', help='azure tenant id')


def add_google_flags(parser: argparse.ArgumentParser) -> None:
    add_flag(parser, '-G', '--google-credentials-file-path',
             help='google service account credentials json file')


def azure_auth(settings, require_subscription: bool = True,
               aux_tenant_ids: list[str] = None) -> AuthConfig:
    """
    Build the Azure auth configuration from the settings.

    Raises:
        ValidationError: If a required credential flag is empty
    """
    keys = list(AZURE_AUTH_KEYS)
    if require_subscription:
        keys.append('subscription-id')
    validate.not_empty(settings, keys)

    return AuthConfig(
        subscription_id=settings.get_str('subscription-id'),
        tenant_id=settings.get_str('tenant-id'),
        client_id=settings.get_str('client-id'),
        client_secret=settings.get_str('client-secret'),
        aux_tenant_ids=aux_tenant_ids or []
    )
