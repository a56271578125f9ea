"""
Compute commands: Azure container instances and GKE clusters.

Usage examples:
  # Create a container group described by a YAML file
  cloud compute azure create-container-instance -c ID -S SECRET -s SUB -t TENANT -f group.yaml

  # Create an Autopilot GKE cluster
  cloud compute google create-cluster -G key.json -p my-project -n default \\
      -c 10.8.0.0/14 -d "test cluster" -L us-central1 -N my-cluster
"""

import logging

import validate
from azuresvc.container import ContainerClient, read_containers_file
from gcpsvc.cluster import ClusterClient, CreateClusterRequest, validate_cluster_name
from shared import (add_azure_flags, add_flag, add_google_flags,
                    add_subcommands, azure_auth, new_command)

logger = logging.getLogger(__name__)

CONTAINER_GROUP_TIMEOUT = 300
CLUSTER_TIMEOUT = 30


def create_container_group(settings) -> None:
    """Create an Azure container group from a YAML file."""
    validate.not_empty(settings, ['file'])
    auth = azure_auth(settings)

    logger.info("creating containers group")
    request = read_containers_file(settings.get_str('file'))
    logger.info(
        f"creating container group with request: {request.model_dump(by_alias=True, exclude_none=True)}")

    client = ContainerClient(auth, timeout=CONTAINER_GROUP_TIMEOUT)
    container_group = client.create_container_group(request)
    logger.info(f"container group '{container_group.name}' created")


def create_cluster(settings) -> None:
    """Create a GKE cluster."""
    validate.not_empty(settings, [
        'google-credentials-file-path', 'project-id', 'network-name',
        'cluster-ipv4-cidr', 'description', 'location', 'name'])
    validate_cluster_name(settings.get_str('name'))

    logger.info("creating cluster")
    client = ClusterClient(settings.get_str('google-credentials-file-path'), timeout=CLUSTER_TIMEOUT)
    client.create_cluster(CreateClusterRequest(
        project_id=settings.get_str('project-id'),
        network_name=settings.get_str('network-name'),
        cluster_ipv4_cidr=settings.get_str('cluster-ipv4-cidr'),
        description=settings.get_str('description'),
        location=settings.get_str('location'),
        name=settings.get_str('name')
    ))


def register(subparsers) -> None:
    """Add the compute command tree."""
    compute = new_command(subparsers, 'compute', 'Control compute in public clouds')
    providers = add_subcommands(compute)

    azure = new_command(providers, 'azure', "Control compute in azure's public clouds")
    azure_commands = add_subcommands(azure)
    create_instance = new_command(
        azure_commands, 'create-container-instance',
        "create compute container instance in azure's public clouds", create_container_group)
    add_azure_flags(create_instance)
    add_flag(create_instance, '-f', '--file', help='container yaml file to deploy')

    google = new_command(providers, 'google', "Control compute/gke in google's public clouds")
    google_commands = add_subcommands(google)
    cluster = new_command(
        google_commands, 'create-cluster', "create gke cluster in google's public clouds", create_cluster)
    add_google_flags(cluster)
    add_flag(cluster, '-p', '--project-id', help='google project id/name')
    add_flag(cluster, '-n', '--network-name', help='google project network name')
    add_flag(cluster, '-c', '--cluster-ipv4-cidr', help='ipv4 cidr of cluster')
    add_flag(cluster, '-d', '--description', help='description of cluster')
    add_flag(cluster, '-L', '--location', help='location in which to create a cluster')
    add_flag(cluster, '-N', '--name', help='name of the cluster to create')
