"""Azure-specific virtual network, subnet and network profile operations."""

import ipaddress
import logging

from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.mgmt.network.models import (AddressSpace,
                                       ContainerNetworkInterfaceConfiguration,
                                       Delegation, IPConfigurationProfile,
                                       NetworkProfile, Subnet, VirtualNetwork)
from pydantic import BaseModel

from errors import ProviderError, ValidationError
from .session import AuthConfig, create_network_client, wait_for

logger = logging.getLogger(__name__)

ACI_DELEGATION_SERVICE_NAME = "Microsoft.ContainerInstance/containerGroups"
DEFAULT_VNET_CIDR = "10.0.0.0/16"
DEFAULT_SUBNET_CIDR = "10.0.0.0/24"


class NetworkProfileRequest(BaseModel):
    """Request to create a network profile (and its vnet/subnet if missing)."""
    name: str
    resource_group_name: str
    location: str
    vnet_name: str
    vnet_address_cidr: str = ''
    subnet_name: str
    subnet_address_cidr: str = ''


def validate_network_profile_request(req: NetworkProfileRequest) -> None:
    """Reject requests with empty names or unparseable CIDRs."""
    if not req.location:
        raise ValidationError("location cannot be empty")
    if not req.resource_group_name:
        raise ValidationError("resource group cannot be empty")
    if not req.name:
        raise ValidationError("name cannot be empty")
    if not req.vnet_name:
        raise ValidationError("vnet name cannot be empty")
    if req.vnet_address_cidr:
        try:
            ipaddress.ip_network(req.vnet_address_cidr, strict=False)
        except ValueError as e:
            raise ValidationError(f"vnet address cidr is invalid: {e}") from e
    if not req.subnet_name:
        raise ValidationError("subnet name cannot be empty")
    if req.subnet_address_cidr:
        try:
            ipaddress.ip_network(req.subnet_address_cidr, strict=False)
        except ValueError as e:
            raise ValidationError(f"subnet address cidr is invalid: {e}") from e


def build_network_profile(req: NetworkProfileRequest, subnet_id: str) -> NetworkProfile:
    """Network profile with a single eth0 interface bound to the subnet."""
    return NetworkProfile(
        location=req.location,
        container_network_interface_configurations=[
            ContainerNetworkInterfaceConfiguration(
                name="eth0",
                ip_configurations=[
                    IPConfigurationProfile(
                        name="ipconfigprofile",
                        subnet=Subnet(name=req.subnet_name, id=subnet_id)
                    )
                ]
            )
        ]
    )


class NetworkClient:
    """
    Azure network client for vnets, subnets and network profiles.

    Args:
        auth: Azure auth configuration
        timeout: Seconds allowed for each operation
        network_client: Pre-built NetworkManagementClient
    """

    def __init__(self, auth: AuthConfig, timeout: float = 30, network_client=None):
        self.auth = auth
        self.timeout = timeout
        self.network_client = network_client or create_network_client(auth)

    def create_network_profile(self, req: NetworkProfileRequest) -> NetworkProfile:
        """
        Create a network profile, creating its vnet and delegated subnet first
        when they do not exist.

        Returns:
            NetworkProfile: The created network profile
        """
        validate_network_profile_request(req)
        req = req.model_copy(update={
            'vnet_address_cidr': req.vnet_address_cidr or DEFAULT_VNET_CIDR,
            'subnet_address_cidr': req.subnet_address_cidr or DEFAULT_SUBNET_CIDR,
        })

        self.ensure_vnet(req)
        subnet = self.ensure_subnet(req)

        try:
            return self.network_client.network_profiles.create_or_update(
                resource_group_name=req.resource_group_name,
                network_profile_name=req.name,
                parameters=build_network_profile(req, subnet.id),
                timeout=self.timeout
            )
        except AzureError as e:
            raise ProviderError(f"failed to create network profile {req.name}", e) from e

    def ensure_vnet(self, req: NetworkProfileRequest) -> VirtualNetwork:
        """Return the vnet, creating it when it does not exist."""
        try:
            vnet = self.network_client.virtual_networks.get(
                resource_group_name=req.resource_group_name,
                virtual_network_name=req.vnet_name,
                timeout=self.timeout
            )
            logger.info(f"vnet {req.vnet_name} already exists")
            return vnet
        except ResourceNotFoundError:
            logger.info(f"vnet {req.vnet_name} was not found, attempting create")
        except AzureError as e:
            raise ProviderError("request to get vnet failed", e) from e

        try:
            poller = self.network_client.virtual_networks.begin_create_or_update(
                resource_group_name=req.resource_group_name,
                virtual_network_name=req.vnet_name,
                parameters=VirtualNetwork(
                    location=req.location,
                    address_space=AddressSpace(
                        address_prefixes=[req.vnet_address_cidr])
                ),
                timeout=self.timeout
            )
        except AzureError as e:
            raise ProviderError("failed to create vnet", e) from e
        vnet = wait_for(poller, self.timeout, "failed to create vnet")

        logger.info(f"vnet {req.vnet_name} was created")
        return vnet

    def ensure_subnet(self, req: NetworkProfileRequest) -> Subnet:
        """Return the subnet, creating it delegated to container groups when missing."""
        try:
            subnet = self.network_client.subnets.get(
                resource_group_name=req.resource_group_name,
                virtual_network_name=req.vnet_name,
                subnet_name=req.subnet_name,
                timeout=self.timeout
            )
            logger.info(f"subnet {req.subnet_name} already exists")
            return subnet
        except ResourceNotFoundError:
            logger.info(f"subnet {req.subnet_name} was not found, attempting create")
        except AzureError as e:
            raise ProviderError("request to get subnet failed", e) from e

        try:
            poller = self.network_client.subnets.begin_create_or_update(
                resource_group_name=req.resource_group_name,
                virtual_network_name=req.vnet_name,
                subnet_name=req.subnet_name,
                subnet_parameters=Subnet(
                    name=req.subnet_name,
                    address_prefix=req.subnet_address_cidr,
                    delegations=[
                        Delegation(
                            name=ACI_DELEGATION_SERVICE_NAME,
                            service_name=ACI_DELEGATION_SERVICE_NAME
                        )
                    ]
                ),
                timeout=self.timeout
            )
        except AzureError as e:
            raise ProviderError("failed to create subnet", e) from e
        subnet = wait_for(poller, self.timeout, "failed to create subnet")

        logger.info(f"subnet {req.subnet_name} was created")
        return subnet

    def list_network_profiles(self, resource_group_name: str) -> list[NetworkProfile]:
        """List the network profiles in a resource group."""
        try:
            profiles = list(self.network_client.network_profiles.list(
                resource_group_name=resource_group_name,
                timeout=self.timeout
            ))
        except AzureError as e:
            raise ProviderError(
                f"failed to list network profile in resource group {resource_group_name}", e) from e

        for profile in profiles:
            logger.debug(f"profile: {profile.as_dict()}")
        return profiles
