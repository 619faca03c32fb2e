"""
Test suite for ls-lmsr

Contains:
- tests/unit/          : Unit tests for math primitives, domain models,
                         contracts and the market engine
"""
