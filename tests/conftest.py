"""Test configuration and fixtures.

All HTTP traffic is served offline by DummyTransport.
"""

from typing import ClassVar, Optional

import pytest

from crmbridge.config import Config
from crmbridge.connection import Connection
from crmbridge.connectors.dummy import DummyTransport
from crmbridge.records.base import BaseRecord
from crmbridge.records.engine import RecordEngine

API_DOMAIN = "https://crmsandbox.zoho.eu"


class SampleRecord(BaseRecord):
    """Minimal record type used across record tests."""

    resource_path: ClassVar[str] = "Leads"

    my_string: Optional[str] = None
    my_bool: Optional[bool] = None


@pytest.fixture
def config() -> Config:
    """Config with explicit values so the environment cannot leak in."""
    return Config(
        client_id="client-id",
        client_secret="client-secret",
        accounts_domain="https://accounts.zoho.eu",
        api_domain=API_DOMAIN,
        api_version="v2",
        debug=False,
        log_level="INFO",
        timeout_s=5.0,
    )


@pytest.fixture
def transport() -> DummyTransport:
    """Offline transport rooted at the API base path."""
    return DummyTransport(base_path="/crm/v2")


@pytest.fixture
def connection(config: Config, transport: DummyTransport) -> Connection:
    conn = Connection(
        access_token="foo",
        refresh_token="xxx",
        config=config,
        transport=transport,
    )
    yield conn
    conn.close()


@pytest.fixture
def engine(connection: Connection) -> RecordEngine:
    return RecordEngine(SampleRecord, connection)
