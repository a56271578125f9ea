"""Azure-specific resource group operations."""

from azure.core.exceptions import AzureError
from azure.mgmt.resource.resources.models import ResourceGroup

from errors import ProviderError
from .session import AuthConfig, create_resource_client


class ResourceGroupClient:
    def __init__(self, auth: AuthConfig, timeout: float = 30, resource_client=None):
        self.auth = auth
        self.timeout = timeout
        self.resource_client = resource_client or create_resource_client(auth)

    def create_resource_group(self, name: str, location: str) -> ResourceGroup:
        """
        Create (or update) a resource group.

        Args:
            name: Resource group name
            location: Azure location, e.g. 'eastus'

        Returns:
            ResourceGroup: The resource group as returned by Azure
        """
        try:
            return self.resource_client.resource_groups.create_or_update(
                resource_group_name=name,
                parameters=ResourceGroup(location=location),
                timeout=self.timeout
            )
        except AzureError as e:
            raise ProviderError(f"failed to create resource group {name}", e) from e
