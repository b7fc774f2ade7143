"""
Repository pattern implementations for Snowflake.

Repositories translate between domain models and database representations.
"""

from .practices import PracticeRepository

__all__ = ["PracticeRepository"]
