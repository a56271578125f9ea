"""GCP-specific GKE cluster operations."""

import logging
import re

from google.cloud import container_v1
from pydantic import BaseModel

from errors import ProviderError, ValidationError
from .session import GOOGLE_ERRORS, create_cluster_manager_client

logger = logging.getLogger(__name__)

CLUSTER_NAME_PATTERN = r"[a-z](?:[-a-z0-9]{0,38}[a-z0-9])?"
CLUSTER_NAME_REGEX = re.compile(CLUSTER_NAME_PATTERN)


class ClusterCommon(BaseModel):
    project_id: str
    network_name: str


class CreateClusterRequest(ClusterCommon):
    """Request to create an Autopilot GKE cluster."""
    cluster_ipv4_cidr: str
    description: str
    location: str
    name: str

    @property
    def parent(self) -> str:
        return f"projects/{self.project_id}/locations/{self.location}"


def validate_cluster_name(name: str) -> None:
    if not CLUSTER_NAME_REGEX.fullmatch(name):
        raise ValidationError(f"cluster name must match regex '{CLUSTER_NAME_PATTERN}'")


def build_cluster(req: CreateClusterRequest) -> container_v1.Cluster:
    return container_v1.Cluster(
        name=req.name,
        description=req.description,
        location=req.location,
        network=req.network_name,
        cluster_ipv4_cidr=req.cluster_ipv4_cidr,
        initial_cluster_version="latest",
        autopilot=container_v1.Autopilot(enabled=True),
        ip_allocation_policy=container_v1.IPAllocationPolicy()
    )


class ClusterClient:
    def __init__(self, credentials_file_path: str = '', timeout: float = 30, cluster_client=None):
        self.timeout = timeout
        self.cluster_client = cluster_client or create_cluster_manager_client(credentials_file_path)

    def create_cluster(self, req: CreateClusterRequest):
        """
        Start creating a GKE cluster within the given location.

        Returns:
            container_v1.Operation: The cluster creation operation
        """
        validate_cluster_name(req.name)
        try:
            operation = self.cluster_client.create_cluster(
                request=container_v1.CreateClusterRequest(
                    parent=req.parent,
                    cluster=build_cluster(req)
                ),
                timeout=self.timeout
            )
        except GOOGLE_ERRORS as e:
            raise ProviderError("failed to create cluster", e) from e
        logger.info("cluster created successfully")
        return operation
