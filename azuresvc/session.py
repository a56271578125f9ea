"""Azure-specific authentication and service creation functions."""

from azure.core.exceptions import AzureError
from azure.identity import ClientSecretCredential
from azure.mgmt.authorization import AuthorizationManagementClient
from azure.mgmt.containerinstance import ContainerInstanceManagementClient
from azure.mgmt.network import NetworkManagementClient
from azure.mgmt.resource import ResourceManagementClient
from pydantic import BaseModel, Field

from errors import ProviderError
from utils import is_debug

MANAGEMENT_SCOPE = "https://management.azure.com/.default"
GRAPH_SCOPE = "https://graph.microsoft.com/.default"
AUXILIARY_HEADER = "x-ms-authorization-auxiliary"


class AuthConfig(BaseModel):
    """Service principal credentials for Azure."""
    subscription_id: str = ''
    tenant_id: str = ''
    client_id: str = ''
    client_secret: str = ''
    # Tenants that must also authorize a cross-tenant request
    aux_tenant_ids: list[str] = Field(default_factory=list)


def create_credential(auth: AuthConfig, tenant_id: str = None) -> ClientSecretCredential:
    """
    Create a client secret credential for the service principal.

    Args:
        auth: Azure auth configuration
        tenant_id: Tenant to authenticate against (defaults to auth.tenant_id)

    Returns:
        ClientSecretCredential: Azure credential
    """
    return ClientSecretCredential(
        tenant_id or auth.tenant_id,
        auth.client_id,
        auth.client_secret,
        additionally_allowed_tenants=list(auth.aux_tenant_ids)
    )


def get_token(auth: AuthConfig, scope: str, tenant_id: str = None) -> str:
    """
    Acquire an access token for the given scope.

    Raises:
        ProviderError: If authentication fails
    """
    try:
        return create_credential(auth, tenant_id).get_token(scope).token
    except AzureError as e:
        raise ProviderError("failed to generate new azure service principal token", e) from e


def get_auxiliary_headers(auth: AuthConfig) -> dict[str, str]:
    """
    Build the header carrying tokens for the auxiliary tenants.

    Returns:
        dict: Empty when no auxiliary tenants are configured
    """
    tenants = [t for t in auth.aux_tenant_ids if t]
    if not tenants:
        return {}
    tokens = [f"Bearer {get_token(auth, MANAGEMENT_SCOPE, tenant)}" for tenant in tenants]
    return {AUXILIARY_HEADER: ', '.join(tokens)}


def create_network_client(auth: AuthConfig):
    """
    Create Azure Network Management client.

    Args:
        auth (AuthConfig): Azure auth configuration

    Returns:
        NetworkManagementClient: Azure network client
    """
    return NetworkManagementClient(
        create_credential(auth), auth.subscription_id, logging_enable=is_debug())


def create_resource_client(auth: AuthConfig):
    """
    Create Azure Resource Management client.

    Args:
        auth (AuthConfig): Azure auth configuration

    Returns:
        ResourceManagementClient: Azure resource client
    """
    return ResourceManagementClient(
        create_credential(auth), auth.subscription_id, logging_enable=is_debug())


def create_authorization_client(auth: AuthConfig):
    """
    Create Azure Authorization Management client.

    Returns:
        AuthorizationManagementClient: Azure role definitions client
    """
    return AuthorizationManagementClient(
        create_credential(auth), auth.subscription_id, logging_enable=is_debug())


def create_container_client(auth: AuthConfig):
    """
    Create Azure Container Instance Management client.

    Returns:
        ContainerInstanceManagementClient: Azure container groups client
    """
    return ContainerInstanceManagementClient(
        create_credential(auth), auth.subscription_id, logging_enable=is_debug())


def wait_for(poller, timeout: float, message: str):
    """
    Wait for a long running operation to finish.

    LROPoller.result returns whatever it has when the timeout expires, so an
    operation still running afterwards is reported as a failure.

    Args:
        poller: LROPoller returned by a begin_* call
        timeout: Seconds to wait
        message: Error message used when the wait fails

    Returns:
        The final resource of the operation

    Raises:
        ProviderError: If the operation fails or is still running
    """
    try:
        result = poller.result(timeout=timeout)
    except AzureError as e:
        raise ProviderError(message, e) from e
    if not poller.done():
        raise ProviderError(f"{message}: operation did not complete within {timeout}s")
    return result
