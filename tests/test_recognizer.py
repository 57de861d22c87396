"""Tests for the token-classification backend and recognizer adapter."""

import logging

import pytest

from anonymization.core.definitions import BackendStatus, DetectionSource, PIIType
from anonymization.core.domain import DetectorConfig
from anonymization.core.exceptions import RecognitionError
from anonymization.engine.recognizer import (
    EntityRecognizer,
    RawSpan,
    TokenClassificationBackend,
)

from fakes import CountingFactory, FakeClassifier, span

TEXT = "Contact John Smith at john.doe@email.com or jane@x.com."


# ── Backend lifecycle ────────────────────────────────────────────────

def test_backend_loads_in_background(make_backend):
    backend = make_backend(FakeClassifier([span(TEXT, "John Smith", "PERSON")]))
    assert backend.status == BackendStatus.READY
    assert backend.is_ready

    outcome = backend.recognize(TEXT)
    assert outcome.ok
    assert outcome.spans == [RawSpan(label="PERSON", word="John Smith", score=0.99, start=8, end=18)]


def test_backend_is_idle_until_started():
    backend = TokenClassificationBackend("fake/model", pipeline_factory=CountingFactory(FakeClassifier()))
    assert backend.status == BackendStatus.IDLE
    outcome = backend.recognize(TEXT)
    assert outcome.error.kind == RecognitionError.UNAVAILABLE


def test_start_is_one_shot():
    factory = CountingFactory(FakeClassifier())
    backend = TokenClassificationBackend("fake/model", pipeline_factory=factory)
    backend.start()
    backend.start()
    assert backend.wait(timeout=5)
    backend.start()
    assert factory.calls == ["fake/model"]


def test_load_failure_leaves_backend_unavailable(make_backend):
    backend = make_backend(error=OSError("no weights"))
    assert backend.status == BackendStatus.UNAVAILABLE

    outcome = backend.recognize(TEXT)
    assert not outcome.ok
    assert outcome.error.kind == RecognitionError.UNAVAILABLE


def test_inference_failure_is_returned_not_raised(make_backend):
    backend = make_backend(FakeClassifier([], fail_times=1))

    failed = backend.recognize(TEXT)
    assert failed.error.kind == RecognitionError.INFERENCE
    assert isinstance(failed.error.__cause__, RuntimeError)

    # The backend stays usable for the next call
    assert backend.recognize(TEXT).ok
    assert backend.status == BackendStatus.READY


def test_empty_text_skips_the_model(make_backend):
    classifier = FakeClassifier()
    backend = make_backend(classifier)
    assert backend.recognize("").ok
    assert classifier.calls == []


def test_raw_span_accepts_entity_key_and_missing_offsets():
    item = {"entity": "B-SSN", "word": "123-45-6789", "score": 0.93}
    assert RawSpan.from_pipeline(item) == RawSpan(label="B-SSN", word="123-45-6789", score=0.93)


# ── Adapter: model path ──────────────────────────────────────────────

def test_model_spans_become_detections(make_backend, all_types_config):
    classifier = FakeClassifier(
        [
            span(TEXT, "John Smith", "PERSON", 0.97),
            span(TEXT, "john.doe@email.com", "B-EMAIL_ADDRESS", 0.99),
            span(TEXT, "jane@x.com", "I-EMAIL_ADDRESS", 0.95),
        ]
    )
    recognizer = EntityRecognizer(backend=make_backend(classifier))

    detections, source = recognizer.recognize(TEXT, all_types_config)

    assert source == DetectionSource.MODEL
    assert [(d.type, d.text, d.start, d.end) for d in detections] == [
        (PIIType.NAME, "John Smith", 8, 18),
        (PIIType.EMAIL, "john.doe@email.com", 22, 40),
        (PIIType.EMAIL, "jane@x.com", 44, 54),
    ]
    assert detections[0].confidence == pytest.approx(0.97)
    assert all(d.original_text == d.text for d in detections)


def test_threshold_filter(make_backend):
    classifier = FakeClassifier(
        [
            span(TEXT, "John Smith", "PERSON", 0.79),
            span(TEXT, "jane@x.com", "EMAIL_ADDRESS", 0.8),
        ]
    )
    recognizer = EntityRecognizer(backend=make_backend(classifier))
    config = DetectorConfig(types=PIIType.ALL, confidence_threshold=0.8)

    detections, _ = recognizer.recognize(TEXT, config)
    assert [d.text for d in detections] == ["jane@x.com"]


def test_type_filter(make_backend):
    text = "SSN 123-45-6789 for jane@x.com"
    classifier = FakeClassifier(
        [span(text, "123-45-6789", "SSN", 0.99), span(text, "jane@x.com", "EMAIL_ADDRESS", 0.99)]
    )
    recognizer = EntityRecognizer(backend=make_backend(classifier))
    config = DetectorConfig(types={PIIType.EMAIL}, confidence_threshold=0.5)

    detections, _ = recognizer.recognize(text, config)
    assert [d.type for d in detections] == [PIIType.EMAIL]


def test_unknown_labels_are_custom(make_backend, all_types_config):
    text = "user: jdoe42"
    classifier = FakeClassifier([span(text, "jdoe42", "I-USERNAME", 0.9)])
    recognizer = EntityRecognizer(backend=make_backend(classifier))

    detections, _ = recognizer.recognize(text, all_types_config)
    assert [(d.type, d.text) for d in detections] == [(PIIType.CUSTOM, "jdoe42")]

    no_custom = all_types_config.updated(types=PIIType.ALL - {PIIType.CUSTOM})
    assert recognizer.recognize(text, no_custom)[0] == []


def test_spans_without_offsets_are_located_in_text(make_backend, all_types_config):
    text = "a@b.io then a@b.io"
    classifier = FakeClassifier(
        [
            {"entity_group": "EMAIL_ADDRESS", "word": "a@b.io", "score": 0.9},
            {"entity_group": "EMAIL_ADDRESS", "word": "a@b.io", "score": 0.9},
            {"entity_group": "PERSON", "word": "Nobody", "score": 0.9},
        ]
    )
    recognizer = EntityRecognizer(backend=make_backend(classifier))

    detections, _ = recognizer.recognize(text, all_types_config)
    assert [(d.start, d.end) for d in detections] == [(0, 6), (12, 18)]


def test_filtered_spans_without_offsets_still_claim_their_text(make_backend, all_types_config):
    text = "John met John"
    classifier = FakeClassifier(
        [
            {"entity_group": "PERSON", "word": "John", "score": 0.5},
            {"entity_group": "PERSON", "word": "John", "score": 0.95},
        ]
    )
    recognizer = EntityRecognizer(backend=make_backend(classifier))

    detections, _ = recognizer.recognize(text, all_types_config)
    assert [(d.start, d.end) for d in detections] == [(9, 13)]


def test_spans_with_invalid_offsets_are_dropped(make_backend, all_types_config):
    text = "short"
    classifier = FakeClassifier(
        [{"entity_group": "PERSON", "word": "x", "start": 3, "end": 3, "score": 0.9}]
    )
    recognizer = EntityRecognizer(backend=make_backend(classifier))
    assert recognizer.recognize(text, all_types_config)[0] == []


# ── Adapter: fallback path ───────────────────────────────────────────

def test_no_backend_uses_fallback(all_types_config):
    detections, source = EntityRecognizer().recognize(TEXT, all_types_config)
    assert source == DetectionSource.FALLBACK
    assert [d.type for d in detections] == [PIIType.NAME, PIIType.EMAIL, PIIType.EMAIL]


def test_fallback_output_is_filtered():
    text = "Call 555-123-4567 or mail a@b.io, SSN 123-45-6789"
    config = DetectorConfig(types={PIIType.EMAIL, PIIType.PHONE}, confidence_threshold=0.5)
    detections, _ = EntityRecognizer().recognize(text, config)
    assert [d.type for d in detections] == [PIIType.PHONE, PIIType.EMAIL]

    strict = config.updated(confidence_threshold=0.95)
    assert EntityRecognizer().recognize(text, strict)[0] == []


def test_load_failure_falls_back(make_backend, all_types_config):
    recognizer = EntityRecognizer(backend=make_backend(error=RuntimeError("offline")))
    detections, source = recognizer.recognize("Mail jane@x.com", all_types_config)
    assert source == DetectionSource.FALLBACK
    assert [d.text for d in detections] == ["jane@x.com"]


def test_inference_failure_falls_back_for_that_call_only(make_backend, all_types_config):
    text = "Mail jane@x.com"
    classifier = FakeClassifier([span(text, "jane@x.com", "EMAIL_ADDRESS", 0.99)], fail_times=1)
    recognizer = EntityRecognizer(backend=make_backend(classifier))

    _, first_source = recognizer.recognize(text, all_types_config)
    detections, second_source = recognizer.recognize(text, all_types_config)

    assert first_source == DetectionSource.FALLBACK
    assert second_source == DetectionSource.MODEL
    assert detections[0].confidence == pytest.approx(0.99)


def test_inference_failure_is_logged_with_traceback(make_backend, all_types_config, caplog):
    text = "Mail jane@x.com"
    recognizer = EntityRecognizer(backend=make_backend(FakeClassifier(fail_times=1)))

    with caplog.at_level(logging.WARNING, logger="anonymization.engine.recognizer"):
        recognizer.recognize(text, all_types_config)

    [record] = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert record.exc_info is not None
    assert isinstance(record.exc_info[1], RecognitionError)
    assert isinstance(record.exc_info[1].__cause__, RuntimeError)
