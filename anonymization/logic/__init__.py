# anonymization/logic/__init__.py

"""Label mapping and the text anonymization engine."""
