"""
Snowflake database connection management.

Provides connection factory and context manager for Snowflake operations.
Includes mock mode with in-memory storage for local development.

Most code never touches this module directly - it goes through
PracticeRepository, which handles the translation between domain models
and database rows.
"""

import base64
import copy
import logging
from contextlib import contextmanager
from typing import Generator, Optional
from uuid import UUID

from .repositories.practices import SnowflakeConfig, SnowflakeConnection

logger = logging.getLogger(__name__)


class SnowflakeConnectionError(Exception):
    """Raised when Snowflake connection fails."""
    pass


def _load_private_key(config: SnowflakeConfig) -> bytes:
    """
    Load the private key for key-pair authentication.

    The key comes either base64-encoded from the environment (deployments)
    or from a PEM file on disk. Snowflake wants DER/PKCS8 bytes, not a path.
    """
    from cryptography.hazmat.backends import default_backend
    from cryptography.hazmat.primitives import serialization

    if config.private_key_base64:
        pem = base64.b64decode(config.private_key_base64)
    else:
        with open(config.private_key_path, 'rb') as key_file:
            pem = key_file.read()

    private_key = serialization.load_pem_private_key(
        pem,
        password=None,  # No password on the key
        backend=default_backend()
    )

    return private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    )


@contextmanager
def get_snowflake_connection(config: SnowflakeConfig) -> Generator[SnowflakeConnection, None, None]:
    """
    Provide Snowflake connection with automatic cleanup.

    Supports both password and key-pair authentication:
    - If a private key (file or base64) is set, uses key-pair auth
    - Otherwise, uses password auth

    Usage:
        with get_snowflake_connection(config) as conn:
            cursor = conn.cursor()
            # do work
            conn.commit()
    """
    try:
        import snowflake.connector
    except ImportError:
        raise ImportError(
            "snowflake-connector-python is required. "
            "Install with: pip install snowflake-connector-python"
        )

    conn = None
    try:
        connect_params = {
            'account': config.account,
            'user': config.user,
            'database': config.database,
            'schema': config.schema,
            'warehouse': config.warehouse,
            'role': config.role,
            'client_session_keep_alive': True,
        }

        if config.private_key_path or config.private_key_base64:
            logger.info("Using key-pair authentication for Snowflake")
            connect_params['private_key'] = _load_private_key(config)
        elif config.password:
            logger.info("Using password authentication for Snowflake")
            connect_params['password'] = config.password
        else:
            raise SnowflakeConnectionError(
                "Either password or a private key must be provided"
            )

        conn = snowflake.connector.connect(**connect_params)

        logger.debug(
            "Established Snowflake connection",
            extra={
                "account": config.account,
                "database": config.database,
                "schema": config.schema,
            }
        )

    except snowflake.connector.errors.DatabaseError as e:
        logger.error(
            "Snowflake connection failed",
            extra={"error": str(e), "account": config.account}
        )
        raise SnowflakeConnectionError(f"Database connection failed: {e}")

    try:
        yield conn
    finally:
        try:
            conn.close()
            logger.debug("Closed Snowflake connection")
        except Exception as e:
            logger.warning(
                "Error closing Snowflake connection",
                extra={"error": str(e)}
            )


# ---------------------------------------------------------------------------
# Mock Connection for Local Development
# ---------------------------------------------------------------------------

class MockSnowflakeCursor:
    """
    Mock Snowflake cursor for testing.

    Implements just enough of the cursor interface to support the
    DELETE / INSERT / SELECT statements PracticeRepository issues,
    dispatching on the statement text.
    """

    def __init__(self, connection: 'MockSnowflakeConnection') -> None:
        self._connection = connection
        self._storage = connection._storage
        self._results: list = []
        self._rowcount: int = 0

    def execute(self, query: str, params: Optional[tuple] = None) -> 'MockSnowflakeCursor':
        logger.debug(
            "Mock cursor execute",
            extra={"query": query[:100], "params": params}
        )

        query_upper = " ".join(query.upper().split())
        self._results = []
        self._rowcount = 0

        if query_upper == 'BEGIN':
            self._connection._begin()

        elif query_upper.startswith('DELETE FROM PRACTICE_SET_ITEMS'):
            self._delete_items(str(params[0]))

        elif query_upper.startswith('DELETE FROM PRACTICE_SETS'):
            self._delete_sets(str(params[0]))

        elif query_upper.startswith('INSERT INTO PRACTICE_SET_ITEMS'):
            self._insert_item(params)

        elif query_upper.startswith('INSERT INTO PRACTICE_SETS'):
            self._insert_set(params)

        elif query_upper.startswith('SELECT') and 'FROM PRACTICE_SETS' in query_upper:
            self._select_practice(str(params[0]))

        elif query_upper.startswith('SELECT'):
            self._results = [(1,)]

        return self

    def _set_ids_for(self, practice_id: str) -> set[str]:
        return {
            set_id for set_id, row in self._storage['practice_sets'].items()
            if row['practice_id'] == practice_id
        }

    def _delete_items(self, practice_id: str) -> None:
        set_ids = self._set_ids_for(practice_id)
        items = self._storage['practice_set_items']
        doomed = [item_id for item_id, row in items.items() if row['set_id'] in set_ids]
        for item_id in doomed:
            del items[item_id]
        self._rowcount = len(doomed)

    def _delete_sets(self, practice_id: str) -> None:
        doomed = self._set_ids_for(practice_id)
        for set_id in doomed:
            del self._storage['practice_sets'][set_id]
        self._rowcount = len(doomed)

    def _insert_set(self, params: tuple) -> None:
        set_id, practice_id, name, set_type, order_index = params
        self._storage['practice_sets'][set_id] = {
            'set_id': set_id,
            'practice_id': practice_id,
            'name': name,
            'set_type': set_type,
            'order_index': order_index,
        }
        self._rowcount = 1

    def _insert_item(self, params: tuple) -> None:
        (item_id, set_id, order_index, reps, distance, stroke,
         interval_text, description, intensity, equipment_json) = params
        self._storage['practice_set_items'][item_id] = {
            'set_id': set_id,
            'order_index': order_index,
            'reps': reps,
            'distance': distance,
            'stroke': stroke,
            'interval_text': interval_text,
            'description': description,
            'intensity': intensity,
            'equipment': equipment_json,
        }
        self._rowcount = 1

    def _select_practice(self, practice_id: str) -> None:
        """Emulate the set/item LEFT JOIN, ordered by set then item."""
        sets = sorted(
            (row for row in self._storage['practice_sets'].values()
             if row['practice_id'] == practice_id),
            key=lambda row: row['order_index'],
        )

        for set_row in sets:
            items = sorted(
                (row for row in self._storage['practice_set_items'].values()
                 if row['set_id'] == set_row['set_id']),
                key=lambda row: row['order_index'],
            )
            set_columns = (
                set_row['set_id'],
                set_row['name'],
                set_row['set_type'],
                set_row['order_index'],
            )
            if not items:
                self._results.append(set_columns + (None,) * 8)
                continue
            for item in items:
                self._results.append(set_columns + (
                    item['order_index'],
                    item['reps'],
                    item['distance'],
                    item['stroke'],
                    item['interval_text'],
                    item['description'],
                    item['intensity'],
                    item['equipment'],
                ))

    def fetchone(self):
        if not self._results:
            return None
        return self._results[0]

    def fetchall(self) -> list:
        return list(self._results)

    def close(self) -> None:
        """Close cursor (no-op for mock)."""
        pass

    @property
    def rowcount(self) -> int:
        return self._rowcount


class MockSnowflakeConnection:
    """
    Mock Snowflake connection for local development.

    Stores rows in memory using a simple dictionary structure. BEGIN takes
    a snapshot that rollback restores, so failed saves behave like they
    would against the real database.

    Not suitable for production, but enough for:
    - Local development
    - Unit tests
    - CI/CD environments
    """

    def __init__(self) -> None:
        # In-memory storage: {table_name: {id: row_dict}}
        self._storage: dict[str, dict[str, dict]] = {
            'practice_sets': {},
            'practice_set_items': {},
        }
        self._snapshot: Optional[dict] = None

        logger.info("Initialized mock Snowflake connection (in-memory)")

    def cursor(self) -> MockSnowflakeCursor:
        return MockSnowflakeCursor(self)

    def _begin(self) -> None:
        self._snapshot = copy.deepcopy(self._storage)

    def commit(self) -> None:
        self._snapshot = None
        logger.debug("Mock connection commit")

    def rollback(self) -> None:
        if self._snapshot is not None:
            self._storage.clear()
            self._storage.update(self._snapshot)
            self._snapshot = None
        logger.debug("Mock connection rollback")

    def close(self) -> None:
        """Close connection (no-op for mock)."""
        logger.debug("Mock connection close")

    # Helper methods for testing
    def _count_sets(self, practice_id: UUID) -> int:
        """Number of stored sets for a practice (for test assertions)."""
        return sum(
            1 for row in self._storage['practice_sets'].values()
            if row['practice_id'] == str(practice_id)
        )

    def _clear(self) -> None:
        """Clear all mock storage (for test cleanup)."""
        for table in self._storage.values():
            table.clear()


@contextmanager
def get_mock_snowflake_connection() -> Generator[MockSnowflakeConnection, None, None]:
    """Provide a fresh in-memory connection."""
    conn = MockSnowflakeConnection()
    try:
        yield conn
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

@contextmanager
def create_snowflake_connection(
    config: Optional[SnowflakeConfig] = None,
    mock_mode: bool = False,
) -> Generator[SnowflakeConnection, None, None]:
    """
    Create Snowflake connection based on configuration.

    Args:
        config: Snowflake configuration (required if not mock_mode)
        mock_mode: If True, return mock connection for testing

    Yields:
        SnowflakeConnection implementation (real or mock)
    """
    if mock_mode:
        with get_mock_snowflake_connection() as conn:
            yield conn
    else:
        if config is None:
            raise ValueError("config is required when not in mock mode")

        with get_snowflake_connection(config) as conn:
            yield conn
