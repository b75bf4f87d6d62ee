"""AWS-backed collaborators (EC2, AppStream, SageMaker)."""

from stream_gateway.aws.clients import AwsClientFactory, is_upstream_failure
from stream_gateway.aws.ec2 import Ec2InstanceLookup
from stream_gateway.aws.appstream import AppStreamUrlProvider
from stream_gateway.aws.sagemaker import SageMakerUrlResolver

__all__ = [
    "AwsClientFactory",
    "is_upstream_failure",
    "Ec2InstanceLookup",
    "AppStreamUrlProvider",
    "SageMakerUrlResolver",
]
