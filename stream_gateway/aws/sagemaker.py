"""
SageMaker notebook private URL resolution.
"""

from __future__ import annotations

import logging

from stream_gateway.aws.clients import AwsClientFactory, AwsCollaborator
from stream_gateway.config.settings import PRESIGNED_URL_EXPIRATION_SECONDS
from stream_gateway.domain.types import ConnectionDescriptor, IncompleteConnectionError, RequestContext
from stream_gateway.resilience import CircuitBreaker

logger = logging.getLogger("stream-gateway")


class SageMakerUrlResolver(AwsCollaborator):
    """Creates presigned notebook instance URLs."""

    service_name = "sagemaker"

    def __init__(
        self,
        client_factory: AwsClientFactory,
        session_expiration_seconds: int = PRESIGNED_URL_EXPIRATION_SECONDS,
        circuit_breaker: CircuitBreaker | None = None,
    ):
        super().__init__(client_factory, circuit_breaker)
        self.session_expiration_seconds = session_expiration_seconds

    def create_private_url(
        self,
        request_context: RequestContext,
        environment_id: str,
        descriptor: ConnectionDescriptor,
    ) -> str:
        """
        Create a presigned URL for the notebook instance behind a connection.

        The notebook instance name is taken from ``info``, falling back to
        ``name``.

        Raises:
            IncompleteConnectionError: If the connection names no notebook instance
        """
        notebook_name = descriptor.info or descriptor.name
        if not notebook_name:
            raise IncompleteConnectionError(
                f"SageMaker connection {descriptor.id} has no notebook instance name"
            )

        sagemaker = self.client_factory.client("sagemaker", environment_id)
        resp = self._call(
            sagemaker.create_presigned_notebook_instance_url,
            "CreatePresignedNotebookInstanceUrl",
            NotebookInstanceName=notebook_name,
            SessionExpirationDurationInSeconds=self.session_expiration_seconds,
        )
        logger.info(f"Created presigned URL for notebook {notebook_name} in environment {environment_id}")
        return resp["AuthorizedUrl"]
