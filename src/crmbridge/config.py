"""Configuration and environment handling for crmbridge."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_ACCOUNTS_DOMAIN = "https://accounts.zoho.eu"
DEFAULT_API_DOMAIN = "https://www.zohoapis.eu"
DEFAULT_API_VERSION = "v2"

# Accounts server -> API server for each data center
API_DOMAINS = {
    "https://accounts.zoho.com": "https://www.zohoapis.com",
    "https://accounts.zoho.com.cn": "https://www.zohoapis.com.cn",
    "https://accounts.zoho.in": "https://www.zohoapis.in",
    "https://accounts.zoho.eu": "https://www.zohoapis.eu",
}


def infer_api_domain(accounts_domain: Optional[str]) -> str:
    """Return the API domain that serves the given accounts domain.

    Unknown, empty or missing accounts domains fall back to DEFAULT_API_DOMAIN.
    """
    if not accounts_domain:
        return DEFAULT_API_DOMAIN
    return API_DOMAINS.get(accounts_domain.rstrip("/"), DEFAULT_API_DOMAIN)


class Config:
    """Central configuration object.

    Values come from keyword arguments first, then the environment
    (optionally seeded from a ``.env`` file). A Config is created once and
    handed to Connection, TokenAuthority and CRMClient explicitly.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        accounts_domain: Optional[str] = None,
        api_domain: Optional[str] = None,
        api_version: Optional[str] = None,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        debug: Optional[bool] = None,
        log_level: Optional[str] = None,
        timeout_s: Optional[float] = None,
        env_file: Optional[Path] = None,
    ):
        if env_file is not None and env_file.exists():
            load_dotenv(env_file)

        self.client_id: str = client_id or os.getenv("CRM_CLIENT_ID", "")
        self.client_secret: str = client_secret or os.getenv("CRM_CLIENT_SECRET", "")
        self.accounts_domain: str = accounts_domain or os.getenv(
            "CRM_ACCOUNTS_DOMAIN", DEFAULT_ACCOUNTS_DOMAIN
        )
        self.api_domain: Optional[str] = api_domain or os.getenv("CRM_API_DOMAIN") or None
        self.api_version: str = api_version or os.getenv("CRM_API_VERSION", DEFAULT_API_VERSION)

        # Credentials used by the CLI and CRMClient.from_config
        self.access_token: Optional[str] = access_token or os.getenv("CRM_ACCESS_TOKEN") or None
        self.refresh_token: Optional[str] = (
            refresh_token or os.getenv("CRM_REFRESH_TOKEN") or None
        )

        if debug is None:
            debug = os.getenv("CRM_DEBUG", "0") == "1"
        self.debug: bool = debug

        # Logging
        self.log_level: str = log_level or os.getenv("CRM_LOG_LEVEL", "INFO")

        self.timeout_s: float = (
            timeout_s if timeout_s is not None else float(os.getenv("CRM_TIMEOUT_S", "30"))
        )

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Config":
        """Build a Config from the environment, loading ``.env`` from the CWD by default."""
        return cls(env_file=env_file or Path.cwd() / ".env")

    def resolved_api_domain(self) -> str:
        """API domain to talk to: explicit override, else inferred from accounts domain."""
        return self.api_domain or infer_api_domain(self.accounts_domain)
