"""
Stream Gateway: connection URL rewriting for cloud workspaces.

This service sits in the connection-creation pipeline of a workspace
environment and makes sure target endpoints are only reached through
AppStream:
- Web (HTTP/HTTPS) connections are opened in a streamed browser
- SSH connections are opened in a streamed terminal on the instance's private IP
- RDP connections are opened in a streamed remote desktop client
- SageMaker notebooks are resolved to a presigned URL before being streamed
- The original target URL is retained on the connection for later use
- Listing operations and disabled gateways leave connections untouched
"""

__version__ = "1.0.0"
