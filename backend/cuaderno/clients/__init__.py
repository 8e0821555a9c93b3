# Clients for collaborators outside this process: object storage and the chatbot gateway

from .storage_client import ObjectStorage, StorageError, safe_filename
from .mabot_client import (
    GatewayConfig, GatewayCredentials, GatewayCredentialsStore, GatewayResult, MabotClient,
)

__all__ = [
    "ObjectStorage", "StorageError", "safe_filename",
    "GatewayConfig", "GatewayCredentials", "GatewayCredentialsStore", "GatewayResult", "MabotClient",
]
