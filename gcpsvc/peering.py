"""GCP-specific VPC network peering operations."""

import logging

from google.cloud import compute_v1
from pydantic import BaseModel

from errors import ProviderError
from .session import GOOGLE_ERRORS, create_networks_client

logger = logging.getLogger(__name__)

PEERING_DIRECTIONS = ['OUTGOING', 'INCOMING']


class PeeringCommon(BaseModel):
    """Fields shared by create and list peering requests."""
    project_id: str
    network_name: str
    peering_name: str = ''


class CreatePeeringRequest(PeeringCommon):
    """Request to peer a project's network with a remote project's network."""
    remote_network_name: str
    remote_project_name: str
    export_custom_routes: bool = False
    export_subnet_routes_with_public_ip: bool = False
    import_custom_routes: bool = False
    import_subnet_routes_with_public_ip: bool = False


class ListPeeringRequest(PeeringCommon):
    """Request to list routes exchanged over a peering."""
    region: str


def remote_network_url(project: str, network: str) -> str:
    return f"https://www.googleapis.com/compute/v1/projects/{project}/global/networks/{network}"


def build_add_peering_request(req: CreatePeeringRequest) -> compute_v1.NetworksAddPeeringRequest:
    return compute_v1.NetworksAddPeeringRequest(
        network_peering=compute_v1.NetworkPeering(
            name=req.peering_name,
            network=remote_network_url(req.remote_project_name, req.remote_network_name),
            exchange_subnet_routes=True,
            export_custom_routes=req.export_custom_routes,
            export_subnet_routes_with_public_ip=req.export_subnet_routes_with_public_ip,
            import_custom_routes=req.import_custom_routes,
            import_subnet_routes_with_public_ip=req.import_subnet_routes_with_public_ip
        )
    )


class PeeringClient:
    """
    GCP network peering client.

    Args:
        credentials_file_path: Service account key file
        timeout: Seconds allowed for each API call
        networks_client: Pre-built compute_v1.NetworksClient
    """

    def __init__(self, credentials_file_path: str = '', timeout: float = 30, networks_client=None):
        self.timeout = timeout
        self.networks_client = networks_client or create_networks_client(credentials_file_path)

    def create_peering(self, req: CreatePeeringRequest) -> None:
        """Create a peering between two projects' networks and wait for it."""
        try:
            operation = self.networks_client.add_peering(
                project=req.project_id,
                network=req.network_name,
                networks_add_peering_request_resource=build_add_peering_request(req),
                timeout=self.timeout
            )
            operation.result(timeout=self.timeout)
        except GOOGLE_ERRORS as e:
            raise ProviderError("failed to create peer", e) from e
        logger.info("peering created successfully")

    def list_peering_routes(self, req: ListPeeringRequest) -> list:
        """
        List routes exchanged over a network's peering, outgoing then incoming.

        Returns:
            list[tuple[str, compute_v1.ExchangedPeeringRoute]]: (direction, route) pairs
        """
        routes = []
        for direction in PEERING_DIRECTIONS:
            request = compute_v1.ListPeeringRoutesNetworksRequest(
                project=req.project_id,
                network=req.network_name,
                region=req.region,
                direction=direction
            )
            if req.peering_name:
                request.peering_name = req.peering_name
            try:
                for route in self.networks_client.list_peering_routes(
                        request=request, timeout=self.timeout):
                    routes.append((direction, route))
            except GOOGLE_ERRORS as e:
                raise ProviderError(f"failed to list {direction.lower()} peering routes", e) from e
        return routes
