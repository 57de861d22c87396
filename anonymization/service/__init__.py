# anonymization/service/__init__.py

"""Detection service, settings, statistics and export."""
