"""
Caller configuration for the remote graph store.

The store consumes it opaquely: endpoint, credentials, session token.
"""

import os
import warnings
from dataclasses import dataclass

import httpx

# Default server URL
DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_TIMEOUT = 30.0

LOCAL_HOSTS = ("localhost", "127.0.0.1", "::1")


def _is_local(url: str) -> bool:
    return httpx.URL(url).host in LOCAL_HOSTS


@dataclass
class ClientConfig:
    """Endpoint and credentials for one caller."""
    base_url: str = DEFAULT_BASE_URL
    api_key: str | None = None
    session: str | None = None
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        self.base_url = self.base_url.rstrip("/")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout!r}")
        if not self.base_url.startswith("https://") and not _is_local(self.base_url):
            warnings.warn(
                f"Using unencrypted HTTP connection to {self.base_url}. "
                "Consider using HTTPS for non-localhost connections.",
                UserWarning,
                stacklevel=3,
            )

    @classmethod
    def from_env(cls, prefix: str = "CLAIMGRAPH_") -> "ClientConfig":
        """
        Build a config from environment variables.

        Reads <prefix>URL, <prefix>API_KEY, <prefix>SESSION and <prefix>TIMEOUT.
        """
        raw_timeout = os.getenv(f"{prefix}TIMEOUT", "").strip()
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise ValueError(f"{prefix}TIMEOUT must be a number, got {raw_timeout!r}") from None
        return cls(
            base_url=os.getenv(f"{prefix}URL") or DEFAULT_BASE_URL,
            api_key=os.getenv(f"{prefix}API_KEY") or None,
            session=os.getenv(f"{prefix}SESSION") or None,
            timeout=timeout,
        )

    def headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["X-Api-Key"] = self.api_key
        if self.session:
            headers["Authorization"] = f"Bearer {self.session}"
        return headers
