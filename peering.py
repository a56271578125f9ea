"""
Peering commands for Azure virtual networks and Google VPC networks.

Usage examples:
  # Peer a vnet with a vnet in another tenant and subscription
  cloud peering azure create -c ID -S SECRET -s SUB -t TENANT \\
      -r src-rg -v src-vnet -p src-to-dst -i DST_TENANT -R dst-rg -V dst-vnet -T DST_SUB

  # Show routes exchanged over a google peering
  cloud peering google list -G key.json -p my-project -n default -r us-central1
"""

import logging

import validate
from azuresvc.peering import CreatePeeringRequest as AzurePeeringRequest
from azuresvc.peering import PeeringClient as AzurePeeringClient
from azuresvc.peering import remote_vnet_id
from gcpsvc.peering import CreatePeeringRequest as GooglePeeringRequest
from gcpsvc.peering import ListPeeringRequest
from gcpsvc.peering import PeeringClient as GooglePeeringClient
from shared import (add_azure_flags, add_flag, add_google_flags,
                    add_subcommands, azure_auth, new_command)
from utils import print_table

logger = logging.getLogger(__name__)

AZURE_PEERING_TIMEOUT = 10
GOOGLE_PEERING_TIMEOUT = 30

AZURE_CREATE_KEYS = [
    'source-resource-group', 'source-virtual-network', 'source-peering-name',
    'target-tenant-id', 'target-resource-group', 'target-virtual-network',
    'target-subscription-id',
]
GOOGLE_CREATE_KEYS = [
    'google-credentials-file-path', 'project-id', 'network-name', 'peering-name',
    'remote-project-name', 'remote-network-name',
]
GOOGLE_ROUTE_FLAGS = [
    ('export-custom-routes', 'export custom routes to the peer network'),
    ('export-subnet-routes-with-public-ip', 'export subnet routes with public ip to the peer network'),
    ('import-custom-routes', 'import custom routes from the peer network'),
    ('import-subnet-routes-with-public-ip', 'import subnet routes with public ip from the peer network'),
]


def build_azure_peering_request(settings) -> AzurePeeringRequest:
    return AzurePeeringRequest(
        source_resource_group=settings.get_str('source-resource-group'),
        source_vnet_name=settings.get_str('source-virtual-network'),
        source_peering_name=settings.get_str('source-peering-name'),
        remote_vnet_id=remote_vnet_id(
            settings.get_str('target-subscription-id'),
            settings.get_str('target-resource-group'),
            settings.get_str('target-virtual-network')),
        allow_virtual_network_access=True,
        allow_forwarded_traffic=settings.get_bool('allow-forwarded-traffic'),
        allow_gateway_transit=settings.get_bool('allow-gateway-transit'),
        use_remote_gateways=settings.get_bool('use-remote-gateways')
    )


def create_azure_peering(settings) -> None:
    validate.not_empty(settings, AZURE_CREATE_KEYS)
    auth = azure_auth(settings, aux_tenant_ids=[settings.get_str('target-tenant-id')])
    client = AzurePeeringClient(auth, timeout=AZURE_PEERING_TIMEOUT)

    logger.info("creating peering")
    peering = client.create(build_azure_peering_request(settings))
    logger.info(f"peering '{peering.name}' created with state {peering.peering_state}")


def list_azure_peerings(settings) -> None:
    validate.not_empty(settings, ['source-resource-group', 'source-virtual-network'])
    client = AzurePeeringClient(azure_auth(settings), timeout=AZURE_PEERING_TIMEOUT)

    logger.info("listing peerings")
    peerings = client.list(settings.get_str('source-resource-group'),
                           settings.get_str('source-virtual-network'))

    rows = []
    for peering in peerings:
        remote = peering.remote_virtual_network.id if peering.remote_virtual_network else ''
        rows.append([peering.name, peering.peering_state, remote])
    print_table(rows, ["Name", "State", "Remote Network"], "No peerings found.")


def build_google_peering_request(settings) -> GooglePeeringRequest:
    return GooglePeeringRequest(
        project_id=settings.get_str('project-id'),
        network_name=settings.get_str('network-name'),
        peering_name=settings.get_str('peering-name'),
        remote_project_name=settings.get_str('remote-project-name'),
        remote_network_name=settings.get_str('remote-network-name'),
        export_custom_routes=settings.get_bool('export-custom-routes'),
        export_subnet_routes_with_public_ip=settings.get_bool('export-subnet-routes-with-public-ip'),
        import_custom_routes=settings.get_bool('import-custom-routes'),
        import_subnet_routes_with_public_ip=settings.get_bool('import-subnet-routes-with-public-ip')
    )


def create_google_peering(settings) -> None:
    validate.not_empty(settings, GOOGLE_CREATE_KEYS)
    client = GooglePeeringClient(settings.get_str('google-credentials-file-path'),
                                 timeout=GOOGLE_PEERING_TIMEOUT)

    logger.info("creating peering")
    client.create_peering(build_google_peering_request(settings))


def list_google_peering_routes(settings) -> None:
    validate.not_empty(settings, ['google-credentials-file-path', 'project-id', 'network-name', 'region'])
    client = GooglePeeringClient(settings.get_str('google-credentials-file-path'),
                                 timeout=GOOGLE_PEERING_TIMEOUT)

    logger.info("listing peering routes")
    routes = client.list_peering_routes(ListPeeringRequest(
        project_id=settings.get_str('project-id'),
        network_name=settings.get_str('network-name'),
        peering_name=settings.get_str('peering-name'),
        region=settings.get_str('region')
    ))

    rows = [
        [direction, route.dest_range, route.type_, route.next_hop_region, route.priority, route.imported]
        for direction, route in routes
    ]
    print_table(rows, ["Direction", "Destination", "Type", "Next Hop Region", "Priority", "Imported"],
                "No peering routes found.")


def register_azure(providers) -> None:
    azure = new_command(providers, 'azure', "Control peering in azure's public clouds")
    azure_commands = add_subcommands(azure)

    create = new_command(azure_commands, 'create', "create peering in azure's public clouds",
                         create_azure_peering)
    add_azure_flags(create)
    add_flag(create, '-r', '--source-resource-group', help='resource group of the source vnet')
    add_flag(create, '-v', '--source-virtual-network', help='name of the source vnet')
    add_flag(create, '-p', '--source-peering-name', help='name of the peering to create')
    add_flag(create, '-i', '--target-tenant-id', help='tenant id of the target vnet')
    add_flag(create, '-R', '--target-resource-group', help='resource group of the target vnet')
    add_flag(create, '-V', '--target-virtual-network', help='name of the target vnet')
    add_flag(create, '-T', '--target-subscription-id', help='subscription id of the target vnet')
    add_flag(create, '--allow-forwarded-traffic', kind=bool,
             help='allow forwarded traffic from the target vnet')
    add_flag(create, '--allow-gateway-transit', kind=bool,
             help='allow gateway links to use the source vnet gateway')
    add_flag(create, '--use-remote-gateways', kind=bool,
             help='use the target vnet gateways')

    list_cmd = new_command(azure_commands, 'list', "list peerings in azure's public clouds",
                           list_azure_peerings)
    add_azure_flags(list_cmd)
    add_flag(list_cmd, '-r', '--source-resource-group', help='resource group of the vnet')
    add_flag(list_cmd, '-v', '--source-virtual-network', help='name of the vnet')


def register_google(providers) -> None:
    google = new_command(providers, 'google', "Control peering in google's public clouds")
    google_commands = add_subcommands(google)

    create = new_command(google_commands, 'create', "create peering in google's public clouds",
                         create_google_peering)
    add_google_flags(create)
    add_flag(create, '-p', '--project-id', help='google project id/name')
    add_flag(create, '-n', '--network-name', help='google project network name')
    add_flag(create, '-P', '--peering-name', help='name of the peering to create')
    add_flag(create, '-r', '--remote-project-name', help='project of the remote network')
    add_flag(create, '-R', '--remote-network-name', help='name of the remote network')
    for name, help_text in GOOGLE_ROUTE_FLAGS:
        add_flag(create, f'--{name}', kind=bool, help=help_text)

    list_cmd = new_command(google_commands, 'list', "list peering routes in google's public clouds",
                           list_google_peering_routes)
    add_google_flags(list_cmd)
    add_flag(list_cmd, '-p', '--project-id', help='google project id/name')
    add_flag(list_cmd, '-n', '--network-name', help='google project network name')
    add_flag(list_cmd, '-P', '--peering-name', help='only list routes of this peering')
    add_flag(list_cmd, '-r', '--region', help='region of the exchanged routes')


def register(subparsers) -> None:
    """Add the peering command tree."""
    peering = new_command(subparsers, 'peering', 'Control peering in public clouds')
    providers = add_subcommands(peering)
    register_azure(providers)
    register_google(providers)
