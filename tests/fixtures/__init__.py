"""
Shared Test Fixtures

Generators used across test layers.

Structure:
    - generators.py: Random data generators
"""

from .generators import (
    random_amount,
    random_amounts,
)

__all__ = [
    "random_amount",
    "random_amounts",
]
