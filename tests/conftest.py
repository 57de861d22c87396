"""Shared fixtures for the anonymization test-suite."""

import pytest

from anonymization.core.domain import DetectorConfig
from anonymization.core.definitions import PIIType
from anonymization.engine.recognizer import EntityRecognizer, TokenClassificationBackend
from anonymization.service.config import Settings
from anonymization.service.pipeline import PIIDetectionService

from fakes import CountingFactory


@pytest.fixture
def all_types_config():
    return DetectorConfig(types=PIIType.ALL, confidence_threshold=0.8)


@pytest.fixture
def make_backend():
    """Returns a factory for backends that finished loading a fake model."""

    def _make(classifier=None, error=None):
        factory = CountingFactory(classifier=classifier, error=error)
        backend = TokenClassificationBackend("fake/model", pipeline_factory=factory)
        backend.start()
        assert backend.wait(timeout=5)
        return backend

    return _make


@pytest.fixture
def make_service(make_backend):
    """Returns a factory for services backed by a fake model (or none)."""

    def _make(classifier=None, **settings_overrides):
        settings = Settings(load_model=False, **settings_overrides)
        backend = make_backend(classifier) if classifier is not None else None
        recognizer = EntityRecognizer(backend=backend)
        return PIIDetectionService(settings=settings, recognizer=recognizer)

    return _make


@pytest.fixture
def fallback_service(make_service):
    return make_service()
