"""Integration tests for eksboot.

These tests talk to real AWS and require valid credentials. Tests that create
EC2 key pairs additionally require EKSBOOT_TEST_ALLOW_WRITES=1.

Tests are marked with @pytest.mark.integration and can be run with:
    pytest tests/integration/ -m integration

To skip integration tests:
    pytest -m "not integration"
"""
