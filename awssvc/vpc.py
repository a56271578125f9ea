"""AWS-specific VPC, subnet and availability zone operations."""

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, Field

from errors import ProviderError, ValidationError
from .session import create_client

logger = logging.getLogger(__name__)

DRY_RUN_OK = 'DryRunOperation'


class CreateVpcRequest(BaseModel):
    """Request to create an AWS VPC."""
    cidr_block: str
    instance_tenancy: str = 'default'
    tag_specifications: list[dict[str, Any]] = Field(default_factory=list)
    dry_run: bool = False


class CreateVpcSubnetRequest(BaseModel):
    """Request to create a subnet within a VPC."""
    cidr_block: str
    vpc_id: str
    availability_zone: str
    tag_specifications: list[dict[str, Any]] = Field(default_factory=list)
    dry_run: bool = False


def is_dry_run_success(error: ClientError) -> bool:
    """EC2 reports a dry run that would have succeeded as a DryRunOperation error."""
    return error.response.get('Error', {}).get('Code') == DRY_RUN_OK


def has_name_tag(tag_specifications: list[dict[str, Any]]) -> bool:
    for spec in tag_specifications:
        for tag in spec.get('Tags', []):
            if str(tag.get('Key', '')).lower() == 'name':
                return True
    return False


class NetworkClient:
    """
    EC2 network client bound to one profile and region.

    Args:
        profile: AWS profile name
        region: AWS region
        timeout: Seconds to wait for each EC2 response
        ec2_client: Pre-built EC2 client, used instead of creating one
    """

    def __init__(self, profile: str, region: str, timeout: float = 30, ec2_client=None):
        self.profile = profile
        self.region = region
        self.ec2_client = ec2_client or create_client(
            'ec2', profile, region, timeout=timeout)

    def create_vpc(self, request: CreateVpcRequest) -> dict | None:
        """
        Create a VPC.

        Args:
            request: VPC creation request. Must carry at least one tag
                specification holding a 'Name' tag.

        Returns:
            dict: The created VPC, or None for a successful dry run

        Raises:
            ValidationError: If tags or the name tag are missing
            ProviderError: If EC2 rejects the request
        """
        if not request.tag_specifications:
            raise ValidationError("tags are required")
        if not has_name_tag(request.tag_specifications):
            raise ValidationError("name tag is required")

        try:
            response = self.ec2_client.create_vpc(
                CidrBlock=request.cidr_block,
                InstanceTenancy=request.instance_tenancy,
                TagSpecifications=request.tag_specifications,
                DryRun=request.dry_run
            )
        except ClientError as e:
            if is_dry_run_success(e):
                logger.info("Dry run: vpc creation would have succeeded")
                return None
            raise ProviderError("failed to create vpc", e) from e
        except BotoCoreError as e:
            raise ProviderError("failed to create vpc", e) from e

        return response['Vpc']

    def list_vpcs(self) -> list[dict]:
        """List VPCs in the region in which the client is configured."""
        all_vpcs = []
        try:
            next_token = None
            while True:
                if next_token:
                    response = self.ec2_client.describe_vpcs(
                        DryRun=False, NextToken=next_token)
                else:
                    response = self.ec2_client.describe_vpcs(DryRun=False)

                all_vpcs.extend(response['Vpcs'])

                next_token = response.get('NextToken')
                if not next_token:
                    break
        except (ClientError, BotoCoreError) as e:
            raise ProviderError("failed to list vpcs", e) from e

        return all_vpcs

    def delete_vpc(self, vpc_id: str) -> None:
        """Delete the given VPC id."""
        try:
            self.ec2_client.delete_vpc(VpcId=vpc_id)
        except (ClientError, BotoCoreError) as e:
            raise ProviderError(f"failed to delete vpc id {vpc_id}", e) from e
        logger.info(f"vpc id {vpc_id} deleted")

    def create_subnet_in_vpc(self, request: CreateVpcSubnetRequest) -> dict | None:
        """
        Create a subnet within a VPC.

        Returns:
            dict: The created subnet, or None for a successful dry run
        """
        params = {
            'CidrBlock': request.cidr_block,
            'VpcId': request.vpc_id,
            'AvailabilityZone': request.availability_zone,
            'DryRun': request.dry_run
        }
        if request.tag_specifications:
            params['TagSpecifications'] = request.tag_specifications

        try:
            response = self.ec2_client.create_subnet(**params)
        except ClientError as e:
            if is_dry_run_success(e):
                logger.info("Dry run: subnet creation would have succeeded")
                return None
            raise ProviderError("failed to create subnet in vpc", e) from e
        except BotoCoreError as e:
            raise ProviderError("failed to create subnet in vpc", e) from e

        return response['Subnet']

    def list_subnets_in_vpc(self, vpc_id: str) -> list[dict]:
        """List the existing subnets within a given VPC."""
        all_subnets = []
        try:
            next_token = None
            while True:
                if next_token:
                    response = self.ec2_client.describe_subnets(
                        Filters=[{'Name': 'vpc-id', 'Values': [vpc_id]}],
                        NextToken=next_token
                    )
                else:
                    response = self.ec2_client.describe_subnets(
                        Filters=[{'Name': 'vpc-id', 'Values': [vpc_id]}]
                    )

                all_subnets.extend(response['Subnets'])

                next_token = response.get('NextToken')
                if not next_token:
                    break
        except (ClientError, BotoCoreError) as e:
            raise ProviderError("failed to list subnets in vpc", e) from e

        return all_subnets

    def list_availability_zones(self) -> list[dict]:
        """List availability zones available to use in the region."""
        try:
            response = self.ec2_client.describe_availability_zones()
        except (ClientError, BotoCoreError) as e:
            raise ProviderError("failed to list availability zones", e) from e
        return response['AvailabilityZones']
