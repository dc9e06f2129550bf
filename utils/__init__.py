"""Utilities and helper functions.

Consolidated utilities:
- title_utils: Title normalization and bigram similarity
- http: JSON-over-HTTP helpers with shared timeout and headers
- cache_manager: Caller-side diskcache wrapper used by the CLI
- logging: loguru configuration
- exceptions: Error hierarchy
"""
