"""
EC2 instance lookup.
"""

from __future__ import annotations

import logging

from stream_gateway.aws.clients import AwsCollaborator

logger = logging.getLogger("stream-gateway")


class Ec2InstanceLookup(AwsCollaborator):
    """Resolves instance network details with ``DescribeInstances``."""

    service_name = "ec2"

    def get_private_ip(self, environment_id: str, instance_id: str | None) -> str | None:
        """
        Get the private IP of an instance's primary network interface.

        Args:
            environment_id: Environment owning the instance
            instance_id: EC2 instance id

        Returns:
            Private IP address, or None when the instance id is missing or
            the instance has no network interface
        """
        if not instance_id:
            logger.warning(f"No instance id given for environment {environment_id}")
            return None

        ec2 = self.client_factory.client("ec2", environment_id)
        data = self._call(ec2.describe_instances, "DescribeInstances", InstanceIds=[instance_id])

        reservations = data.get("Reservations") or []
        instances = (reservations[0].get("Instances") or []) if reservations else []
        if not instances:
            logger.warning(f"Instance {instance_id} not found in environment {environment_id}")
            return None

        network_interfaces = instances[0].get("NetworkInterfaces") or []
        if not network_interfaces:
            logger.warning(f"Instance {instance_id} has no network interfaces")
            return None
        return network_interfaces[0].get("PrivateIpAddress")
