"""
SwimPractice - structured swim practices from coach-typed notation.

This package contains the complete application:
- core: Framework-agnostic practice models, parser and serializer
- infrastructure: Snowflake persistence
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
