"""Entry point wiring configuration, connection and record engines together.

    client = CRMClient.from_config(Config.from_env())
    lead = client.records(Lead).find("1234")
    client.records("Contacts").where(email="jane@example.com")
"""

import logging
from typing import Any, Callable, Dict, Optional, Type, Union

from crmbridge.auth import TokenGrant
from crmbridge.config import Config
from crmbridge.connection import Connection
from crmbridge.connectors.http_client import HTTPClient
from crmbridge.records.base import BaseRecord
from crmbridge.records.engine import RecordEngine
from crmbridge.records.modules import record_type

logger = logging.getLogger(__name__)


class CRMClient:
    """A Connection plus one memoized RecordEngine per record type."""

    def __init__(self, connection: Connection):
        self.connection = connection
        self._engines: Dict[Type[BaseRecord], RecordEngine] = {}

    @classmethod
    def from_config(
        cls,
        config: Config,
        on_refresh: Optional[Callable[[TokenGrant], None]] = None,
        on_initialize_connection: Optional[Callable[[HTTPClient], None]] = None,
        **connection_kwargs: Any,
    ) -> "CRMClient":
        """Build a client from the credentials held by ``config``."""
        connection_kwargs.setdefault("access_token", config.access_token)
        connection_kwargs.setdefault("refresh_token", config.refresh_token)
        connection = Connection(
            config=config,
            on_refresh=on_refresh,
            on_initialize_connection=on_initialize_connection,
            **connection_kwargs,
        )
        return cls(connection)

    def records(self, record_cls: Union[str, Type[BaseRecord]]) -> RecordEngine:
        """Engine for a record type, given as a class or a resource path such as "Leads"."""
        if isinstance(record_cls, str):
            record_cls = record_type(record_cls)
        if record_cls not in self._engines:
            self._engines[record_cls] = RecordEngine(record_cls, self.connection)
        return self._engines[record_cls]

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> "CRMClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
