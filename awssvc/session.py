"""AWS-specific authentication and service creation functions."""

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError

from errors import ProviderError


def create_session(profile: str, region: str):
    """
    Create AWS session for a specific profile and region.

    Args:
        profile (str): AWS profile name from the shared config/credentials files
        region (str): AWS region

    Returns:
        boto3.Session: AWS session object
    """
    return boto3.Session(profile_name=profile, region_name=region)


def create_client(service: str, profile: str, region: str, timeout: float = 60):
    """
    Create AWS client for a specific service, profile and region.

    Args:
        service (str): AWS service name (e.g., 'ec2')
        profile (str): AWS profile name
        region (str): AWS region
        timeout (float): Seconds to wait for a response from the service

    Returns:
        boto3.client: AWS service client with retry configuration

    Raises:
        ProviderError: If the profile cannot be loaded
    """
    retry_config = Config(
        retries={
            'max_attempts': 3,
            'mode': 'standard'
        },
        connect_timeout=10,
        read_timeout=timeout
    )

    try:
        session = create_session(profile, region)
        return session.client(service, config=retry_config)
    except BotoCoreError as e:
        raise ProviderError(
            f"failed to get {service} credentials provider from profile {profile}", e) from e
