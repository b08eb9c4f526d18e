"""
Test suite for RWA Epoch

Contains:
- tests/unit/          : Unit tests for individual modules
"""
