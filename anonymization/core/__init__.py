# anonymization/core/__init__.py

"""Core domain models and utilities used across the anonymization package.

This package provides domain types, exceptions, and the pattern/label
tables shared by the rest of the application.
"""
