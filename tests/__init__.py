"""
DoseTrack Test Suite
====================

This package contains all tests for the DoseTrack adherence service.

Test Structure:
- test_tools/: adherence engine unit tests (pure, no database)
- test_services/: service tests against an in-memory database
- test_api/: API endpoint tests for FastAPI routes
- conftest.py: Shared pytest fixtures

Running Tests:
    # Run all tests
    pytest

    # Run specific test module
    pytest tests/test_tools/

    # Run only marked tests
    pytest -m "unit"
    pytest -m "api"
"""

# Test configuration
TEST_DATABASE_URL = "sqlite:///:memory:"
TEST_USER_EMAIL = "test.user@example.com"

__all__ = [
    "TEST_DATABASE_URL",
    "TEST_USER_EMAIL",
]
