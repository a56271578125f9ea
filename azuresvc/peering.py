"""Azure-specific virtual network peering operations."""

import logging

from azure.core.exceptions import AzureError
from azure.mgmt.network.models import SubResource, VirtualNetworkPeering
from pydantic import BaseModel

from errors import ProviderError
from .session import (AuthConfig, create_network_client, get_auxiliary_headers,
                      wait_for)

logger = logging.getLogger(__name__)


class CreatePeeringRequest(BaseModel):
    """Request to peer a source vnet with a remote vnet."""
    source_resource_group: str
    source_vnet_name: str
    source_peering_name: str
    remote_vnet_id: str
    allow_virtual_network_access: bool = True
    allow_forwarded_traffic: bool = False
    allow_gateway_transit: bool = False
    use_remote_gateways: bool = False


def remote_vnet_id(subscription_id: str, resource_group: str, vnet_name: str) -> str:
    """Resource id of a virtual network."""
    return (
        f"/subscriptions/{subscription_id}/resourceGroups/{resource_group}"
        f"/providers/Microsoft.Network/virtualNetworks/{vnet_name}"
    )


def build_peering(request: CreatePeeringRequest) -> VirtualNetworkPeering:
    return VirtualNetworkPeering(
        name=request.source_peering_name,
        allow_virtual_network_access=request.allow_virtual_network_access,
        allow_forwarded_traffic=request.allow_forwarded_traffic,
        allow_gateway_transit=request.allow_gateway_transit,
        use_remote_gateways=request.use_remote_gateways,
        remote_virtual_network=SubResource(id=request.remote_vnet_id)
    )


class PeeringClient:
    """
    Azure vnet peering client.

    When auth.aux_tenant_ids is set, create requests carry tokens for those
    tenants so a peering can reach a vnet in another tenant.
    """

    def __init__(self, auth: AuthConfig, timeout: float = 10, network_client=None):
        self.auth = auth
        self.timeout = timeout
        self.network_client = network_client or create_network_client(auth)

    def create(self, request: CreatePeeringRequest) -> VirtualNetworkPeering:
        """Create a peering connection from the source vnet."""
        logger.debug(
            f"attempting to create peering with request {request.model_dump()}, "
            f"subscription {self.auth.subscription_id}, tenant {self.auth.tenant_id}")

        headers = get_auxiliary_headers(self.auth)
        try:
            poller = self.network_client.virtual_network_peerings.begin_create_or_update(
                resource_group_name=request.source_resource_group,
                virtual_network_name=request.source_vnet_name,
                virtual_network_peering_name=request.source_peering_name,
                virtual_network_peering_parameters=build_peering(request),
                headers=headers,
                timeout=self.timeout
            )
        except AzureError as e:
            raise ProviderError("unable to create peering", e) from e
        peering = wait_for(poller, self.timeout, "unable to create peering")

        logger.debug("successfully created peering")
        return peering

    def list(self, resource_group: str, vnet_name: str) -> list[VirtualNetworkPeering]:
        """List existing peering connections of a vnet."""
        try:
            peerings = list(self.network_client.virtual_network_peerings.list(
                resource_group_name=resource_group,
                virtual_network_name=vnet_name,
                timeout=self.timeout
            ))
        except AzureError as e:
            raise ProviderError("unable to list peerings", e) from e

        if not peerings:
            logger.debug("no peerings found")
        return peerings
