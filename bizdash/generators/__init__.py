"""
BizDash Analytics - Generators Package

Synthetic record generators feeding the dashboard endpoints.
"""

from bizdash.generators.mock_data import MockDataGenerator

__all__ = ["MockDataGenerator"]
