# anonymization/engine/__init__.py

"""Engine package providing the token-classification backend and regex fallback.

This package contains the components that turn raw text into scored
detections.
"""
