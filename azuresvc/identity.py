"""
Azure identity operations: Entra ID applications, service principals and
role definitions.

Applications and service principals live in Microsoft Graph, which is called
over REST with a token from the service principal credential. Role
definitions come from the ARM authorization API.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import requests
from azure.core.exceptions import AzureError
from pydantic import BaseModel, Field

from errors import (ApplicationAlreadyExistsError, ProviderError,
                    ServicePrincipalAlreadyExistsError, ValidationError)
from .session import (GRAPH_SCOPE, AuthConfig, create_authorization_client,
                      get_token)

logger = logging.getLogger(__name__)

GRAPH_URL = "https://graph.microsoft.com/v1.0"
CREDENTIAL_LIFETIME = timedelta(days=365)


class ApplicationConfig(BaseModel):
    """Configuration for an Entra ID application."""
    app_id: str | None = None
    available_to_other_tenants: bool = False
    display_name: str = ''
    home_page: str = ''
    identifier_uris: list[str] = Field(default_factory=list)


def odata_quote(value: str) -> str:
    """Quote a string literal for an OData $filter expression."""
    return "'" + value.replace("'", "''") + "'"


def build_application_body(app_config: ApplicationConfig) -> dict[str, Any]:
    """Graph application resource for a create request."""
    sign_in_audience = 'AzureADMultipleOrgs' if app_config.available_to_other_tenants else 'AzureADMyOrg'
    body = {
        'displayName': app_config.display_name,
        'signInAudience': sign_in_audience,
        'identifierUris': list(app_config.identifier_uris)
    }
    if app_config.home_page:
        body['web'] = {'homePageUrl': app_config.home_page}
    return body


class IdentityClient:
    """
    Client for Entra ID applications, service principals and role definitions.

    Args:
        auth: Azure auth configuration
        timeout: Seconds allowed for each request
        session: requests session used for Graph calls
        token_provider: Returns a Graph bearer token
        authorization_client: Pre-built AuthorizationManagementClient
    """

    def __init__(self, auth: AuthConfig, timeout: float = 30, session: requests.Session = None,
                 token_provider: Callable[[], str] = None, authorization_client=None):
        self.auth = auth
        self.timeout = timeout
        self.session = session or requests.Session()
        self.token_provider = token_provider or (lambda: get_token(auth, GRAPH_SCOPE))
        self._authorization_client = authorization_client

    @property
    def authorization_client(self):
        if self._authorization_client is None:
            self._authorization_client = create_authorization_client(self.auth)
        return self._authorization_client

    def _graph(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        """Send a Microsoft Graph request and return the decoded JSON body."""
        headers = {
            'Authorization': f"Bearer {self.token_provider()}",
            'Content-Type': 'application/json'
        }
        try:
            response = self.session.request(
                method, f"{GRAPH_URL}{path}", headers=headers, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ProviderError(f"graph request {method} {path} failed", e) from e

        if not response.content:
            return {}
        return response.json()

    def create_ad_application(self, app_config: ApplicationConfig) -> dict[str, Any]:
        """
        Create an Entra ID application.

        Raises:
            ApplicationAlreadyExistsError: If an application with the same
                display name already exists
        """
        existing = self._graph('GET', '/applications', params={
            '$filter': f"displayName eq {odata_quote(app_config.display_name)}"
        })
        if existing.get('value'):
            raise ApplicationAlreadyExistsError(app_config.display_name)

        return self._graph('POST', '/applications', json=build_application_body(app_config))

    def create_service_principal(self, app_config: ApplicationConfig) -> dict[str, Any]:
        """
        Create a service principal associated with the specified application.

        Raises:
            ValidationError: If no app id is given
            ServicePrincipalAlreadyExistsError: If an application service
                principal with the same display name already exists
        """
        if not app_config.app_id:
            raise ValidationError("app id cannot be empty")

        filter_expr = (
            f"displayName eq {odata_quote(app_config.display_name)} "
            "and servicePrincipalType eq 'Application'"
        )
        existing = self._graph('GET', '/servicePrincipals', params={'$filter': filter_expr})
        if existing.get('value'):
            raise ServicePrincipalAlreadyExistsError(app_config.display_name)

        return self._graph('POST', '/servicePrincipals', json={
            'appId': app_config.app_id,
            'accountEnabled': True
        })

    def create_application_credentials(self, app_config: ApplicationConfig) -> str:
        """
        Add a password credential, valid for one year, to an application.

        Returns:
            str: The generated secret
        """
        if not app_config.app_id:
            raise ValidationError("app id cannot be empty")

        start = datetime.now(timezone.utc)
        body = {
            'passwordCredential': {
                'displayName': app_config.display_name,
                'startDateTime': start.isoformat(),
                'endDateTime': (start + CREDENTIAL_LIFETIME).isoformat()
            }
        }
        path = f"/applications(appId={odata_quote(app_config.app_id)})/addPassword"
        try:
            credential = self._graph('POST', path, json=body)
        except ProviderError as e:
            raise ProviderError("failed to update password credentials for app", e.cause or e) from e

        secret = credential.get('secretText')
        if not secret:
            raise ProviderError("failed to update password credentials for app: no secret returned")
        return secret

    def list_role_definitions(self, resource_group: str, vnet_name: str) -> list:
        """List role definitions scoped to a virtual network."""
        scope = (
            f"/subscriptions/{self.auth.subscription_id}/resourceGroups/{resource_group}"
            f"/providers/Microsoft.Network/virtualNetworks/{vnet_name}"
        )
        try:
            return list(self.authorization_client.role_definitions.list(
                scope=scope, timeout=self.timeout))
        except AzureError as e:
            raise ProviderError("failed to list role definitions", e) from e
