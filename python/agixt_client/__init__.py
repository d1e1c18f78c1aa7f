"""
agixt-client - Python client for AGiXT

An async-first Python client exposing every endpoint of the AGiXT agent
orchestration REST API: agents, conversations, chains, prompts, memories,
users and media generation.
"""

from agixt_client.client import ERROR_MESSAGE, AGiXTClient, AGiXTClientError
from agixt_client.config import ClientConfig

__version__ = "0.1.0"
__all__ = [
    "AGiXTClient",
    "AGiXTClientError",
    "ClientConfig",
    "ERROR_MESSAGE",
]
