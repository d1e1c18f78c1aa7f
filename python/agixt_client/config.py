"""
Environment configuration for the AGiXT client.
"""

import os
from pathlib import Path
from typing import Optional, Union

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "http://localhost:7437"


class ClientConfig(BaseModel):
    """Connection settings for an AGiXT server."""

    base_url: str = Field(DEFAULT_BASE_URL, description="AGiXT server URI")
    api_key: Optional[str] = Field(None, description="API key or JWT")
    timeout: float = Field(300.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(True, description="Whether to verify SSL certificates")

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "ClientConfig":
        """
        Build a config from AGIXT_* environment variables.

        Args:
            env_file: Optional .env file loaded before reading the environment.
                Variables already set in the environment take precedence.

        Returns:
            ClientConfig populated from the environment
        """
        if env_file is not None:
            env_path = Path(env_file)
            if env_path.exists():
                load_dotenv(env_path)
        else:
            load_dotenv(find_dotenv(usecwd=True))

        return cls(
            base_url=os.environ.get("AGIXT_URI", DEFAULT_BASE_URL),
            api_key=os.environ.get("AGIXT_API_KEY") or None,
            timeout=float(os.environ.get("AGIXT_TIMEOUT", 300)),
            verify_ssl=os.environ.get("AGIXT_VERIFY_SSL", "true").lower() in ["true", "1", "t", "yes"],
        )
