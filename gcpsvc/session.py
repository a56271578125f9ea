"""GCP-specific authentication and service creation functions."""

import concurrent.futures

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import compute_v1, container_v1
from google.oauth2 import service_account

from errors import ProviderError

# Failures of a Google call: API errors, credential refresh errors and
# operation waits that run past their timeout
GOOGLE_ERRORS = (GoogleAPIError, GoogleAuthError, concurrent.futures.TimeoutError)


def load_credentials(credentials_file_path: str) -> service_account.Credentials:
    """
    Load service account credentials from a JSON key file.

    Args:
        credentials_file_path (str): Path to the service account key file

    Returns:
        service_account.Credentials: GCP credentials

    Raises:
        ProviderError: If the file is missing or not a valid key file
    """
    try:
        return service_account.Credentials.from_service_account_file(credentials_file_path)
    except (OSError, ValueError, GoogleAuthError) as e:
        raise ProviderError(
            f"failed to load google credentials from {credentials_file_path}", e) from e


def create_networks_client(credentials_file_path: str):
    """
    Create GCP Networks client.

    Returns:
        compute_v1.NetworksClient: GCP networks client
    """
    return compute_v1.NetworksClient(credentials=load_credentials(credentials_file_path))


def create_cluster_manager_client(credentials_file_path: str):
    """
    Create GKE Cluster Manager client.

    Returns:
        container_v1.ClusterManagerClient: GKE client
    """
    return container_v1.ClusterManagerClient(credentials=load_credentials(credentials_file_path))
