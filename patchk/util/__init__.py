"""
Utilities for running completeness checks outside of Python code.
"""
