"""
Pytest configuration and shared fixtures.
"""

import pytest
from unittest.mock import Mock

from simple_odata.core.session import ODataResponse
from simple_odata.odata.client import ODataClient


API_ROOT = "https://api.test"


@pytest.fixture
def sample_odata_response():
    """Sample OData v4 list response."""
    return ODataResponse(
        status=200,
        headers={"Content-Type": "application/json"},
        url=f"{API_ROOT}/items",
        data={
            "value": [
                {"ID": "001", "Name": "Test 1", "Status": "open"},
                {"ID": "002", "Name": "Test 2", "Status": "open"},
            ]
        },
    )


@pytest.fixture
def mock_session(sample_odata_response):
    """Create a mock HttpSession that answers every request."""
    session = Mock()
    session.request = Mock(return_value=sample_odata_response)
    return session


@pytest.fixture
def client(mock_session):
    """Custom-parameter client without defaults."""
    return ODataClient(API_ROOT, session=mock_session)


@pytest.fixture
def sample_error_body():
    """Sample OData error payload."""
    return {
        "error": {
            "code": "BadRequest",
            "message": "Property 'Nope' does not exist",
        }
    }
