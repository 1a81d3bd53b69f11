"""
Unit Test Fixtures for Collaboration Service

Uses CollaborationTestDataFactory from the data contract.
"""

import pytest

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from tests.contracts.collaboration.data_contract import CollaborationTestDataFactory


@pytest.fixture
def factory() -> CollaborationTestDataFactory:
    """Provide test data factory"""
    return CollaborationTestDataFactory()
