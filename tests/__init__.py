"""
Test suite for Pharma CRM Analytics.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_client_analytics_service.py -v
"""
