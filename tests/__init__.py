"""Test suite for the Kandinsky client.

Test Structure:
- unit/api/http/: HTTP wrapper (status mapping, auth headers, retries)
- unit/generation/: model resolution, submission, polling and decoding
- unit/config/: settings files and environment overrides
- unit/utils/: logging configuration
- unit/cli/: command-line entry point
- conftest.py: Shared fixtures and test configuration
"""
