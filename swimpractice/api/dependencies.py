"""
FastAPI dependency injection.

Dependencies provide repositories and configuration to route handlers.
Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be overridden in tests
- Connection lifecycle is managed in one place

Each dependency is a function that FastAPI calls when needed.
"""

import logging
from typing import Annotated, Generator

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..infrastructure.snowflake.client import (
    MockSnowflakeConnection,
    create_snowflake_connection,
)
from ..infrastructure.snowflake.repositories.practices import (
    PracticeRepository,
    SnowflakeConfig,
)

logger = logging.getLogger(__name__)

# API Key security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# Shared mock connection so stored practices survive across requests
_mock_snowflake_connection = None


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def verify_api_key(
    settings: Annotated[Settings, Depends(get_settings)],
    api_key: str = Security(api_key_header),
) -> str:
    """
    Validate API key from request header.

    Raises 403 if key is invalid or missing.
    """
    if not api_key:
        logger.warning("Request missing API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key required. Provide X-API-Key header.",
        )

    if api_key not in settings.api_keys_list:
        logger.warning(
            "Invalid API key attempt",
            extra={"key_prefix": api_key[:8]}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


# ---------------------------------------------------------------------------
# Repository Dependencies
# ---------------------------------------------------------------------------

def get_mock_connection() -> MockSnowflakeConnection:
    """Return the process-wide mock connection, creating it on first use."""
    global _mock_snowflake_connection

    if _mock_snowflake_connection is None:
        _mock_snowflake_connection = MockSnowflakeConnection()
        logger.info("Created shared mock Snowflake connection")

    return _mock_snowflake_connection


def snowflake_config(settings: Settings) -> SnowflakeConfig:
    """Connection settings for the real Snowflake account."""
    return SnowflakeConfig(
        account=settings.snowflake_account,
        user=settings.snowflake_user,
        password=settings.snowflake_password or None,
        private_key_path=settings.snowflake_private_key_path,
        private_key_base64=settings.snowflake_private_key_base64,
        database=settings.snowflake_database,
        schema=settings.snowflake_schema,
        warehouse=settings.snowflake_warehouse,
        role=settings.snowflake_role,
    )


def get_practice_repository(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[PracticeRepository, None, None]:
    """
    Provide PracticeRepository with database connection.

    A generator so the connection is closed after the request:
    1. Create connection
    2. Create repository
    3. Yield repository (FastAPI injects it)
    4. Close connection

    In mock mode the same in-memory connection is reused across
    requests so saved practices can be read back.
    """
    if settings.snowflake_mock_mode:
        yield PracticeRepository(get_mock_connection())
        return

    with create_snowflake_connection(config=snowflake_config(settings)) as conn:
        logger.debug("Created PracticeRepository with Snowflake connection")
        yield PracticeRepository(conn)


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

AuthenticatedUser = Annotated[str, Depends(verify_api_key)]
PracticeRepositoryDep = Annotated[PracticeRepository, Depends(get_practice_repository)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
