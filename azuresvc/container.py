"""Azure-specific container instance (container group) operations."""

import logging
from typing import Any

from azure.core.exceptions import AzureError
from azure.mgmt.containerinstance.models import ContainerGroup
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from errors import ProviderError, ValidationError
from utils import read_yaml_as_json
from .session import AuthConfig, create_container_client, wait_for

logger = logging.getLogger(__name__)


class CreateContainerRequest(BaseModel):
    """
    Request to create an Azure container group.

    Field names follow the ARM template shape so a container group YAML file
    can be decoded directly; 'properties' keeps the REST layout
    (containers, osType, ipAddress, ...).
    """
    model_config = ConfigDict(populate_by_name=True)

    api_version: str | None = Field(default=None, alias="apiVersion")
    type: str | None = None
    container_group_name: str = Field(..., alias="name", min_length=1)
    location: str = Field(..., min_length=1)
    resource_group_name: str = Field(..., alias="resourceGroup", min_length=1)
    properties: dict[str, Any] = Field(...)

    def to_container_group(self) -> ContainerGroup:
        """Build the SDK model from the REST shaped properties."""
        return ContainerGroup.deserialize({
            'name': self.container_group_name,
            'location': self.location,
            'properties': self.properties
        })


def read_containers_file(filename: str) -> CreateContainerRequest:
    """
    Decode a container group YAML file into a CreateContainerRequest.

    Raises:
        ValidationError: If the file cannot be read or does not describe a
            container group
    """
    document = read_yaml_as_json(filename)
    if not isinstance(document, dict):
        raise ValidationError(
            f"failed to encode containers yaml file {filename} into a valid map")
    try:
        return CreateContainerRequest.model_validate(document)
    except PydanticValidationError as e:
        raise ValidationError(
            f"failed to encode containers yaml file {filename} into a valid request: {e}") from e


class ContainerClient:
    def __init__(self, auth: AuthConfig, timeout: float = 300, container_client=None):
        self.auth = auth
        self.timeout = timeout
        self.container_client = container_client or create_container_client(auth)

    def create_container_group(self, req: CreateContainerRequest) -> ContainerGroup:
        """
        Create a container group and wait for it to come online.

        Returns:
            ContainerGroup: The created container group
        """
        try:
            poller = self.container_client.container_groups.begin_create_or_update(
                resource_group_name=req.resource_group_name,
                container_group_name=req.container_group_name,
                container_group=req.to_container_group(),
                timeout=self.timeout
            )
        except AzureError as e:
            raise ProviderError("failed to create container group", e) from e

        return wait_for(poller, self.timeout, "failed waiting for container group to come online")
