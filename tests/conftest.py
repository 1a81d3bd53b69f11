"""
Root conftest.py - Global configuration for all test layers.

Test Layers:
    - component/  : Component tests (mocked dependencies)
    - unit/       : Unit tests (pure functions, no I/O)

Layer specific fixtures live in each layer's conftest.py; the collaboration
test-data factory lives in tests/contracts/collaboration/data_contract.py.
"""
import os
import sys

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)


def pytest_collection_modifyitems(config, items):
    """Tag tests with their layer marker based on location"""
    for item in items:
        path = str(item.path)
        if f"{os.sep}unit{os.sep}" in path:
            item.add_marker(pytest.mark.unit)
        elif f"{os.sep}component{os.sep}" in path:
            item.add_marker(pytest.mark.component)
