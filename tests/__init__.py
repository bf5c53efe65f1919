"""
SectionCompare Tests Package
============================
Test suite for the section comparison engine and API.

Run all tests: python3 -m pytest tests/ -v
Run specific: python3 -m pytest tests/test_differ.py -v
"""
