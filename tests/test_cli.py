import concurrent.futures
import logging
import os
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from azure.core.exceptions import ServiceResponseError

import cloud
import config

AZURE_FLAGS = ['-c', 'client', '-S', 'secret', '-s', 'sub', '-t', 'tenant']
AWS_FLAGS = ['-p', 'default', '-r', 'us-east-1']


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    """Keep the host environment, config file and logging setup out of the commands."""
    for name in list(os.environ):
        if name.startswith(config.ENV_PREFIX):
            monkeypatch.delenv(name)
    monkeypatch.setattr(config, 'DEFAULT_CONFIG_PATH', tmp_path / '.cloud.yaml')
    monkeypatch.setattr(cloud, 'setup_logging', lambda *args, **kwargs: logging.INFO)


def critical_messages(caplog) -> list[str]:
    return [r.getMessage() for r in caplog.records if r.levelno == logging.CRITICAL]


class TestRoot:

    def test_group_without_subcommand_prints_help(self, capsys):
        assert cloud.main(['network']) == 0
        out = capsys.readouterr().out
        assert 'aws' in out
        assert 'azure' in out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cloud.main(['--version'])
        assert exc_info.value.code == 0
        assert cloud.VERSION in capsys.readouterr().out

    def test_missing_config_file_fails(self, tmp_path, caplog):
        assert cloud.main(['--config', str(tmp_path / 'nope.yaml'), 'network']) == 1
        assert any('Configuration file not found' in m for m in critical_messages(caplog))


class TestValidationFailures:

    @pytest.mark.parametrize('argv, message', [
        (['network', 'aws', 'vpc', 'create', '-r', 'us-east-1'],
         "profile cannot be empty: name cannot be empty"),
        (['network', 'aws', 'vpc', 'delete'] + AWS_FLAGS, "id cannot be empty"),
        (['network', 'aws', 'vpc', 'list-subnets', '-p', 'default'],
         "region cannot be empty: id cannot be empty"),
        (['network', 'azure', 'network-profile', 'list'] + AZURE_FLAGS,
         "resource-group cannot be empty"),
        (['resources', 'azure', 'resource-groups', 'add', '-n', 'rg'] + AZURE_FLAGS,
         "location cannot be empty"),
        (['resources', 'azure', 'resource-groups', 'add', '-n', 'rg', '-L', 'eastus'],
         "client-id cannot be empty"),
        (['identity', 'azure', 'users', 'add', '-d', 'app'] + AZURE_FLAGS, "app-id cannot be empty"),
        (['identity', 'azure', 'roles', 'list', '-r', 'rg'] + AZURE_FLAGS, "vnet-name cannot be empty"),
        (['peering', 'azure', 'create', '-r', 'rg'] + AZURE_FLAGS,
         "source-virtual-network cannot be empty"),
        (['peering', 'google', 'list', '-p', 'proj', '-n', 'net'],
         "google-credentials-file-path cannot be empty: region cannot be empty"),
        (['compute', 'azure', 'create-container-instance'] + AZURE_FLAGS, "file cannot be empty"),
        (['compute', 'google', 'create-cluster', '-G', 'key.json', '-p', 'proj', '-n', 'net',
          '-c', '10.8.0.0/14', '-d', 'desc', '-L', 'us-central1', '-N', 'Bad_Name'],
         "cluster name must match regex"),
    ])
    def test_rejected(self, argv, message, caplog):
        assert cloud.main(argv) == 1
        assert any(m.startswith("failure running cloud command:") and message in m
                   for m in critical_messages(caplog))


class TestNetworkCommands:

    @patch('network.NetworkClient')
    def test_vpc_create_builds_tags(self, client_class):
        client_class.return_value.create_vpc.return_value = {'VpcId': 'vpc-1'}

        assert cloud.main(['network', 'aws', 'vpc', 'create', '-n', 'main'] + AWS_FLAGS) == 0

        assert client_class.call_args.kwargs['timeout'] == 300
        request = client_class.return_value.create_vpc.call_args.args[0]
        assert request.cidr_block == '10.4.240.0/21'
        assert request.dry_run is False
        assert request.tag_specifications == [{
            'ResourceType': 'vpc',
            'Tags': [{'Key': 'environment', 'Value': 'development'}, {'Key': 'Name', 'Value': 'main'}],
        }]

    @patch('network.NetworkClient')
    def test_vpc_create_from_environment(self, client_class, monkeypatch):
        monkeypatch.setenv('CLOUD_NAME', 'env-vpc')
        monkeypatch.setenv('CLOUD_DRY_RUN', 'true')
        client_class.return_value.create_vpc.return_value = None

        assert cloud.main(['network', 'aws', 'vpc', 'create'] + AWS_FLAGS) == 0

        request = client_class.return_value.create_vpc.call_args.args[0]
        assert request.dry_run is True
        assert {'Key': 'Name', 'Value': 'env-vpc'} in request.tag_specifications[0]['Tags']

    @patch('network.NetworkClient')
    def test_vpc_create_from_config_file(self, client_class, tmp_path):
        path = tmp_path / 'cloud.yaml'
        path.write_text("profile: default\nregion: us-west-2\nname: file-vpc\n")
        client_class.return_value.create_vpc.return_value = {'VpcId': 'vpc-1'}

        assert cloud.main(['--config', str(path), 'network', 'aws', 'vpc', 'create', '-r', 'eu-west-1']) == 0

        assert client_class.call_args.args == ('default', 'eu-west-1')

    @patch('network.NetworkClient')
    def test_create_subnet_tags_and_az(self, client_class):
        client_class.return_value.create_subnet_in_vpc.return_value = {'SubnetId': 'subnet-1'}

        argv = ['network', 'aws', 'vpc', 'create-subnet', '-i', 'vpc-1', '-c', '10.4.241.0/24',
                '-t', 'team,net', '-d'] + AWS_FLAGS
        assert cloud.main(argv) == 0

        request = client_class.return_value.create_subnet_in_vpc.call_args.args[0]
        assert request.availability_zone == 'us-east-1a'
        assert request.dry_run is True
        assert request.tag_specifications[0]['Tags'] == [
            {'Key': 'team', 'Value': 'net'}, {'Key': 'Availability-Zone', 'Value': 'us-east-1a'}]

    @patch('network.NetworkClient')
    def test_vpc_list_prints_table(self, client_class, capsys):
        client_class.return_value.list_vpcs.return_value = [
            {'VpcId': 'vpc-1', 'CidrBlock': '10.0.0.0/16', 'IsDefault': True},
            {'VpcId': 'vpc-2', 'CidrBlock': '10.1.0.0/16',
             'Tags': [{'Key': 'Name', 'Value': 'main'}]},
            {'VpcId': 'vpc-3', 'CidrBlock': '10.2.0.0/16', 'Tags': []},
        ]

        assert cloud.main(['network', 'aws', 'vpc', 'list'] + AWS_FLAGS) == 0

        out = capsys.readouterr().out
        assert 'vpc-1' in out and 'default' in out
        assert 'main' in out
        assert 'unnamed' in out

    @patch('network.AzureNetworkClient')
    def test_network_profile_add_lowercases_location(self, client_class):
        argv = ['network', 'azure', 'network-profile', 'add', '-n', 'profile', '-r', 'rg',
                '-L', 'EastUS', '-v', 'vnet', '-N', 'aci'] + AZURE_FLAGS
        assert cloud.main(argv) == 0

        request = client_class.return_value.create_network_profile.call_args.args[0]
        assert request.location == 'eastus'
        assert request.vnet_address_cidr == '10.0.0.0/16'
        assert request.subnet_address_cidr == '10.0.0.0/24'


class TestOtherCommands:

    @patch('resources.ResourceGroupClient')
    def test_resource_group_add(self, client_class):
        argv = ['resources', 'azure', 'resource-groups', 'add', '-n', 'rg', '-L', 'WestEurope'] + AZURE_FLAGS
        assert cloud.main(argv) == 0
        client_class.return_value.create_resource_group.assert_called_once_with('rg', 'westeurope')

    @patch('peering.AzurePeeringClient')
    def test_azure_peering_create(self, client_class):
        argv = ['peering', 'azure', 'create', '-r', 'rg', '-v', 'vnet', '-p', 'to-remote',
                '-i', 'tenant-2', '-R', 'rg-2', '-V', 'vnet-2', '-T', 'sub-2',
                '--allow-forwarded-traffic'] + AZURE_FLAGS
        assert cloud.main(argv) == 0

        auth = client_class.call_args.args[0]
        assert auth.aux_tenant_ids == ['tenant-2']
        assert client_class.call_args.kwargs['timeout'] == 10
        request = client_class.return_value.create.call_args.args[0]
        assert request.remote_vnet_id == (
            "/subscriptions/sub-2/resourceGroups/rg-2/providers/Microsoft.Network/virtualNetworks/vnet-2")
        assert request.allow_forwarded_traffic is True
        assert request.use_remote_gateways is False

    @patch('peering.GooglePeeringClient')
    def test_google_peering_create(self, client_class):
        argv = ['peering', 'google', 'create', '-G', 'key.json', '-p', 'proj-a', '-n', 'net-a',
                '-P', 'a-to-b', '-r', 'proj-b', '-R', 'net-b', '--export-custom-routes']
        assert cloud.main(argv) == 0

        assert client_class.call_args.args == ('key.json',)
        request = client_class.return_value.create_peering.call_args.args[0]
        assert request.remote_project_name == 'proj-b'
        assert request.export_custom_routes is True
        assert request.import_custom_routes is False

    @patch('identity.IdentityClient')
    def test_application_add_defaults(self, client_class):
        client_class.return_value.create_ad_application.return_value = {'appId': 'app-1'}

        argv = ['identity', 'azure', 'applications', 'add', '-d', 'app', '-i', 'api://a,api://b',
                '-c', 'client', '-S', 'secret', '-t', 'tenant']
        assert cloud.main(argv) == 0

        config_arg = client_class.return_value.create_ad_application.call_args.args[0]
        assert config_arg.available_to_other_tenants is True
        assert config_arg.home_page == 'https://microsoft.com'
        assert config_arg.identifier_uris == ['api://a', 'api://b']

    @patch('compute.ContainerClient')
    def test_create_container_instance(self, client_class, tmp_path):
        path = tmp_path / 'group.yaml'
        path.write_text("name: web\nlocation: eastus\nresourceGroup: rg\nproperties: {osType: Linux}\n")
        client_class.return_value.create_container_group.return_value = MagicMock()

        argv = ['compute', 'azure', 'create-container-instance', '-f', str(path)] + AZURE_FLAGS
        assert cloud.main(argv) == 0

        assert client_class.call_args.kwargs['timeout'] == 300
        request = client_class.return_value.create_container_group.call_args.args[0]
        assert request.container_group_name == 'web'


class TestGlobalFlags:

    @patch('network.NetworkClient')
    def test_loglevel_after_subcommand(self, client_class, monkeypatch):
        levels = []
        monkeypatch.setattr(cloud, 'setup_logging', lambda level='info': levels.append(level))
        client_class.return_value.list_vpcs.return_value = []

        assert cloud.main(['network', 'aws', 'vpc', 'list', '-l', 'debug'] + AWS_FLAGS) == 0
        assert levels == ['debug']

    @patch('network.NetworkClient')
    def test_config_after_subcommand(self, client_class, tmp_path):
        path = tmp_path / 'cloud.yaml'
        path.write_text("profile: from-file\nregion: us-west-2\n")
        client_class.return_value.list_vpcs.return_value = []

        assert cloud.main(['network', 'aws', 'vpc', 'list', '--config', str(path)]) == 0
        assert client_class.call_args.args == ('from-file', 'us-west-2')


class TestProviderFailures:

    @patch('azuresvc.resource_group.create_resource_client')
    def test_azure_read_timeout_exits_nonzero(self, create_client, caplog):
        create_client.return_value.resource_groups.create_or_update.side_effect = \
            ServiceResponseError("read timed out")

        argv = ['resources', 'azure', 'resource-groups', 'add', '-n', 'rg', '-L', 'eastus'] + AZURE_FLAGS
        assert cloud.main(argv) == 1
        assert any('read timed out' in m for m in critical_messages(caplog))

    @patch('gcpsvc.peering.create_networks_client')
    def test_google_operation_timeout_exits_nonzero(self, create_client, caplog):
        create_client.return_value.add_peering.return_value.result.side_effect = \
            concurrent.futures.TimeoutError("op timed out")

        argv = ['peering', 'google', 'create', '-G', 'key.json', '-p', 'proj-a', '-n', 'net-a',
                '-P', 'a-to-b', '-r', 'proj-b', '-R', 'net-b']
        assert cloud.main(argv) == 1
        assert any('failed to create peer' in m for m in critical_messages(caplog))


class TestIdentityCommands:

    @patch('identity.IdentityClient')
    def test_users_add(self, client_class):
        argv = ['identity', 'azure', 'users', 'add', '-a', 'app-1', '-d', 'app'] + AZURE_FLAGS
        assert cloud.main(argv) == 0

        app = client_class.return_value.create_service_principal.call_args.args[0]
        assert app.app_id == 'app-1'
        assert app.display_name == 'app'

    @patch('identity.IdentityClient')
    def test_add_credentials(self, client_class, caplog):
        caplog.set_level(logging.INFO)
        client_class.return_value.create_application_credentials.return_value = 's3cret'

        argv = ['identity', 'azure', 'applications', 'add-credentials', '-a', 'app-1', '-d', 'app'] + AZURE_FLAGS
        assert cloud.main(argv) == 0

        app = client_class.return_value.create_application_credentials.call_args.args[0]
        assert app.app_id == 'app-1'
        assert any('s3cret' in r.getMessage() and 'app-1' in r.getMessage() for r in caplog.records)

    @patch('identity.IdentityClient')
    def test_roles_list(self, client_class, capsys):
        client_class.return_value.list_role_definitions.return_value = [
            SimpleNamespace(name='role-guid', role_name='Network Contributor', description='Manage networks'),
        ]

        argv = ['identity', 'azure', 'roles', 'list', '-r', 'rg', '-v', 'vnet'] + AZURE_FLAGS
        assert cloud.main(argv) == 0

        client_class.return_value.list_role_definitions.assert_called_once_with('rg', 'vnet')
        out = capsys.readouterr().out
        assert 'role-guid' in out
        assert 'Network Contributor' in out


class TestListAndDeleteCommands:

    @patch('peering.AzurePeeringClient')
    def test_azure_peering_list(self, client_class, capsys):
        client_class.return_value.list.return_value = [
            SimpleNamespace(name='to-remote', peering_state='Connected',
                            remote_virtual_network=SimpleNamespace(id='/subscriptions/s/vnet-2')),
            SimpleNamespace(name='dangling', peering_state='Disconnected', remote_virtual_network=None),
        ]

        argv = ['peering', 'azure', 'list', '-r', 'rg', '-v', 'vnet'] + AZURE_FLAGS
        assert cloud.main(argv) == 0

        client_class.return_value.list.assert_called_once_with('rg', 'vnet')
        out = capsys.readouterr().out
        assert 'Connected' in out
        assert '/subscriptions/s/vnet-2' in out
        assert 'dangling' in out

    @patch('peering.GooglePeeringClient')
    def test_google_peering_routes(self, client_class, capsys):
        client_class.return_value.list_peering_routes.return_value = [
            ('OUTGOING', SimpleNamespace(dest_range='10.0.0.0/24', type_='SUBNET_PEERING_ROUTE',
                                         next_hop_region='us-central1', priority=1000, imported=False)),
            ('INCOMING', SimpleNamespace(dest_range='10.9.0.0/24', type_='DYNAMIC_PEERING_ROUTE',
                                         next_hop_region='europe-west1', priority=100, imported=True)),
        ]

        argv = ['peering', 'google', 'list', '-G', 'key.json', '-p', 'proj-a', '-n', 'net-a',
                '-r', 'us-central1', '-P', 'a-to-b']
        assert cloud.main(argv) == 0

        request = client_class.return_value.list_peering_routes.call_args.args[0]
        assert request.region == 'us-central1'
        assert request.peering_name == 'a-to-b'
        out = capsys.readouterr().out
        assert 'SUBNET_PEERING_ROUTE' in out
        assert 'europe-west1' in out
        assert '10.9.0.0/24' in out

    @patch('compute.ClusterClient')
    def test_create_cluster(self, client_class):
        argv = ['compute', 'google', 'create-cluster', '-G', 'key.json', '-p', 'proj', '-n', 'net',
                '-c', '10.8.0.0/14', '-d', 'desc', '-L', 'us-central1', '-N', 'my-cluster']
        assert cloud.main(argv) == 0

        assert client_class.call_args.args == ('key.json',)
        assert client_class.call_args.kwargs['timeout'] == 30
        request = client_class.return_value.create_cluster.call_args.args[0]
        assert request.parent == 'projects/proj/locations/us-central1'
        assert request.network_name == 'net'
        assert request.cluster_ipv4_cidr == '10.8.0.0/14'
        assert request.name == 'my-cluster'

    @patch('network.NetworkClient')
    def test_vpc_delete(self, client_class):
        assert cloud.main(['network', 'aws', 'vpc', 'delete', '-i', 'vpc-1'] + AWS_FLAGS) == 0
        client_class.return_value.delete_vpc.assert_called_once_with('vpc-1')

    @patch('network.NetworkClient')
    def test_list_subnets(self, client_class, capsys):
        client_class.return_value.list_subnets_in_vpc.return_value = [
            {'SubnetId': 'subnet-1', 'AvailabilityZone': 'us-east-1a', 'CidrBlock': '10.4.240.0/24'},
        ]

        assert cloud.main(['network', 'aws', 'vpc', 'list-subnets', '-i', 'vpc-1'] + AWS_FLAGS) == 0

        client_class.return_value.list_subnets_in_vpc.assert_called_once_with('vpc-1')
        out = capsys.readouterr().out
        assert 'subnet-1' in out
        assert '10.4.240.0/24' in out

    @patch('network.NetworkClient')
    def test_az_list(self, client_class, capsys):
        client_class.return_value.list_availability_zones.return_value = [
            {'ZoneName': 'us-east-1a', 'ZoneId': 'use1-az1', 'State': 'available'},
            {'ZoneName': 'us-east-1b', 'ZoneId': 'use1-az2', 'State': 'available'},
        ]

        assert cloud.main(['network', 'aws', 'regions', 'az-list'] + AWS_FLAGS) == 0

        out = capsys.readouterr().out
        assert 'use1-az1' in out
        assert 'us-east-1b' in out
