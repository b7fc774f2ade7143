"""
Infrastructure layer - external service integrations.

- snowflake: Database persistence for structured practices

These wrappers translate between external formats and our domain models.
"""
