"""
Core domain models, mathematical primitives, and contracts.

This module contains the foundational building blocks of the settlement
engine that are independent of how the market is driven.
"""
