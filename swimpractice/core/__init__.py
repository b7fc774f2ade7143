"""
Core business logic for swim practices.

This module is framework-agnostic - it doesn't import FastAPI, Snowflake,
or any infrastructure concerns, so the notation parser can be tested
and reused in isolation.
"""
