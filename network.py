"""
Network commands: AWS VPCs, subnets and availability zones, and Azure
network profiles.

Usage examples:
  # Create a VPC tagged Name=my-vpc plus the default environment tag
  cloud network aws vpc create -p default -r us-east-1 -n my-vpc -c 10.4.240.0/21

  # List VPCs and the subnets of one of them
  cloud network aws vpc list -p default -r us-east-1
  cloud network aws vpc list-subnets -p default -r us-east-1 -i vpc-12345

  # Create a network profile for container groups, with its vnet and subnet
  cloud network azure network-profile add -c ID -S SECRET -s SUB -t TENANT \\
      -n my-profile -r my-rg -L eastus -v my-vnet -N aci-subnet
"""

import logging

import validate
from awssvc.vpc import CreateVpcRequest, CreateVpcSubnetRequest, NetworkClient
from azuresvc.network import (DEFAULT_SUBNET_CIDR, DEFAULT_VNET_CIDR,
                              NetworkClient as AzureNetworkClient,
                              NetworkProfileRequest)
from shared import (add_aws_flags, add_azure_flags, add_flag, add_subcommands,
                    azure_auth, new_command)
from utils import format_tags, print_table, tags_from_list

logger = logging.getLogger(__name__)

AWS_TIMEOUT = 30
AWS_CREATE_VPC_TIMEOUT = 300
AZURE_TIMEOUT = 30

DEFAULT_AWS_CIDR = '10.4.240.0/21'
DEFAULT_AZ = 'us-east-1a'
DEFAULT_TAGS = ['environment', 'development']


def new_aws_client(settings, timeout: float = AWS_TIMEOUT) -> NetworkClient:
    return NetworkClient(settings.get_str('profile'), settings.get_str('region'), timeout=timeout)


def vpc_name(vpc: dict) -> str:
    """Name tag of a VPC, or a marker for default and unnamed VPCs."""
    for tag in vpc.get('Tags', []):
        if tag.get('Key') == 'Name':
            return tag.get('Value', '')
    if vpc.get('IsDefault', False):
        return 'default'
    return 'unnamed'


def build_create_vpc_request(settings) -> CreateVpcRequest:
    tags = tags_from_list(settings.get_list('additional-tags'))
    tags.append({'Key': 'Name', 'Value': settings.get_str('name')})
    return CreateVpcRequest(
        cidr_block=settings.get_str('cidr'),
        instance_tenancy='default',
        tag_specifications=[{'ResourceType': 'vpc', 'Tags': tags}],
        dry_run=settings.get_bool('dry-run')
    )


def build_create_subnet_request(settings) -> CreateVpcSubnetRequest:
    tags = tags_from_list(settings.get_list('additional-tags'))
    tags.append({'Key': 'Availability-Zone', 'Value': settings.get_str('az')})
    return CreateVpcSubnetRequest(
        cidr_block=settings.get_str('cidr'),
        vpc_id=settings.get_str('id'),
        availability_zone=settings.get_str('az'),
        tag_specifications=[{'ResourceType': 'subnet', 'Tags': tags}],
        dry_run=settings.get_bool('dry-run')
    )


def create_vpc(settings) -> None:
    validate.not_empty(settings, ['profile', 'name', 'region', 'cidr'])
    client = new_aws_client(settings, timeout=AWS_CREATE_VPC_TIMEOUT)

    logger.info("creating vpc")
    vpc = client.create_vpc(build_create_vpc_request(settings))
    if vpc is None:
        return
    logger.info(f"aws vpc '{settings.get_str('name')}' created with id {vpc['VpcId']}")


def list_vpcs(settings) -> None:
    validate.not_empty(settings, ['region', 'profile'])
    client = new_aws_client(settings)

    logger.info("listing vpcs")
    rows = []
    for vpc in client.list_vpcs():
        rows.append([
            vpc['VpcId'],
            vpc_name(vpc),
            vpc.get('CidrBlock', ''),
            'yes' if vpc.get('IsDefault', False) else '',
            format_tags(vpc.get('Tags', []))
        ])
    print_table(rows, ["ID", "Name", "CIDR", "Default", "Tags"], "No VPCs found.")


def delete_vpc(settings) -> None:
    validate.not_empty(settings, ['region', 'profile', 'id'])
    client = new_aws_client(settings)

    logger.info("deleting vpc")
    client.delete_vpc(settings.get_str('id'))


def create_subnet_in_vpc(settings) -> None:
    validate.not_empty(settings, ['region', 'profile', 'id', 'cidr', 'az'])
    client = new_aws_client(settings)

    logger.info("creating subnet in vpc")
    subnet = client.create_subnet_in_vpc(build_create_subnet_request(settings))
    if subnet is None:
        return
    logger.info(f"subnet {subnet['SubnetId']} created in vpc {settings.get_str('id')}")


def list_subnets_in_vpc(settings) -> None:
    validate.not_empty(settings, ['region', 'profile', 'id'])
    client = new_aws_client(settings)

    logger.info("listing subnets in vpc")
    rows = [
        [subnet['SubnetId'], subnet.get('AvailabilityZone', ''), subnet.get('CidrBlock', '')]
        for subnet in client.list_subnets_in_vpc(settings.get_str('id'))
    ]
    print_table(rows, ["ID", "AZ", "CIDR"], "No subnets found.")


def list_availability_zones(settings) -> None:
    validate.not_empty(settings, ['region', 'profile'])
    client = new_aws_client(settings)

    logger.info("listing azs")
    rows = [
        [az['ZoneName'], az.get('ZoneId', ''), az.get('State', '')]
        for az in client.list_availability_zones()
    ]
    print_table(rows, ["AZ", "Zone ID", "State"], "No availability zones found.")


def create_network_profile(settings) -> None:
    validate.not_empty(settings, ['name', 'resource-group', 'location', 'vnet-name', 'subnet-name'])
    client = AzureNetworkClient(azure_auth(settings), timeout=AZURE_TIMEOUT)

    logger.info("creating network profile")
    client.create_network_profile(NetworkProfileRequest(
        name=settings.get_str('name'),
        resource_group_name=settings.get_str('resource-group'),
        location=settings.get_str('location').lower(),
        vnet_name=settings.get_str('vnet-name'),
        vnet_address_cidr=settings.get_str('vnet-cidr'),
        subnet_name=settings.get_str('subnet-name'),
        subnet_address_cidr=settings.get_str('subnet-cidr')
    ))
    logger.info(f"network profile '{settings.get_str('name')}' created")


def list_network_profiles(settings) -> None:
    validate.not_empty(settings, ['resource-group'])
    client = AzureNetworkClient(azure_auth(settings), timeout=AZURE_TIMEOUT)

    logger.info("listing network profiles")
    rows = [
        [profile.name, profile.location, profile.provisioning_state]
        for profile in client.list_network_profiles(settings.get_str('resource-group'))
    ]
    print_table(rows, ["Name", "Location", "State"], "No network profiles found.")


def register_aws(providers) -> None:
    aws = new_command(providers, 'aws', "Control networks in AWS's public clouds")
    aws_commands = add_subcommands(aws)

    vpc = new_command(aws_commands, 'vpc', "control VPCs in AWS's public clouds")
    vpc_commands = add_subcommands(vpc)

    create = new_command(vpc_commands, 'create', "create VPC in AWS's public clouds", create_vpc)
    add_aws_flags(create)
    add_flag(create, '-n', '--name', help='name of vpc')
    add_flag(create, '-c', '--cidr', default=DEFAULT_AWS_CIDR, help='virtual network cidr to use')
    add_flag(create, '-d', '--dry-run', kind=bool, help='dry-run the vpc creation')
    add_flag(create, '-t', '--additional-tags', default=DEFAULT_TAGS, kind=list,
             help='tags to apply to vpc as key,value pairs')

    delete = new_command(vpc_commands, 'delete', "delete VPC in AWS's public clouds", delete_vpc)
    add_aws_flags(delete)
    add_flag(delete, '-i', '--id', help='vpc id to delete')

    list_cmd = new_command(vpc_commands, 'list', "list VPCs in AWS's public clouds", list_vpcs)
    add_aws_flags(list_cmd)

    create_subnet = new_command(
        vpc_commands, 'create-subnet', "create subnet in VPC in AWS's public clouds", create_subnet_in_vpc)
    add_aws_flags(create_subnet)
    add_flag(create_subnet, '-i', '--id', help='vpc id to create subnet within')
    add_flag(create_subnet, '-c', '--cidr', default=DEFAULT_AWS_CIDR, help='subnet cidr to use')
    add_flag(create_subnet, '-a', '--az', default=DEFAULT_AZ,
             help='availability zone to create cidr within')
    add_flag(create_subnet, '-t', '--additional-tags', default=DEFAULT_TAGS, kind=list,
             help='tags to apply to vpc subnet as key,value pairs')
    add_flag(create_subnet, '-d', '--dry-run', kind=bool, help='dry-run the vpc subnet creation')

    list_subnets = new_command(
        vpc_commands, 'list-subnets', "list subnets within a vpc in AWS's public clouds", list_subnets_in_vpc)
    add_aws_flags(list_subnets)
    add_flag(list_subnets, '-i', '--id', help='vpc id to list subnets within')

    regions = new_command(aws_commands, 'regions', "control regions/azs in AWS's public clouds")
    region_commands = add_subcommands(regions)
    az_list = new_command(region_commands, 'az-list', "list AZs in AWS's public clouds",
                          list_availability_zones)
    add_aws_flags(az_list)


def register_azure(providers) -> None:
    azure = new_command(providers, 'azure', "Control networks in azure's public clouds")
    azure_commands = add_subcommands(azure)

    profile = new_command(azure_commands, 'network-profile',
                          "control network profiles in azure's public clouds")
    profile_commands = add_subcommands(profile)

    add = new_command(profile_commands, 'add', "add network profile in azure's public clouds",
                      create_network_profile)
    add_azure_flags(add)
    add_flag(add, '-n', '--name', help='name of network profile')
    add_flag(add, '-r', '--resource-group', help='name of resource group')
    add_flag(add, '-L', '--location', help='location/region of network profile')
    add_flag(add, '-v', '--vnet-name', help='name of the virtual network to use/create')
    add_flag(add, '-N', '--subnet-name', help='name of the subnet to use/create')
    add_flag(add, '-V', '--vnet-cidr', default=DEFAULT_VNET_CIDR, help='virtual network cidr to use')
    add_flag(add, '-C', '--subnet-cidr', default=DEFAULT_SUBNET_CIDR, help='subnet cidr to use')

    list_cmd = new_command(profile_commands, 'list', "list network profile in azure's public clouds",
                           list_network_profiles)
    add_azure_flags(list_cmd)
    add_flag(list_cmd, '-r', '--resource-group', help='name of resource group')


def register(subparsers) -> None:
    """Add the network command tree."""
    network = new_command(subparsers, 'network', 'Control networks in public clouds')
    providers = add_subcommands(network)
    register_azure(providers)
    register_aws(providers)
