"""Tests for the model label and placeholder tables."""

import pytest

from anonymization.core.definitions import PIIType
from anonymization.core.loader import PatternLoader
from anonymization.logic.labels import map_label, placeholder_name, strip_bio_prefix


@pytest.mark.parametrize(
    "label,expected",
    [
        ("EMAIL_ADDRESS", PIIType.EMAIL),
        ("PHONE_NUMBER", PIIType.PHONE),
        ("PERSON", PIIType.NAME),
        ("CREDIT_CARD_NUMBER", PIIType.CREDIT_CARD),
        ("LOCATION", PIIType.ADDRESS),
        ("IP_ADDRESS", PIIType.IP_ADDRESS),
        ("SSN", PIIType.SSN),
        ("DATE_TIME", PIIType.DATE_OF_BIRTH),
        ("PASSPORT_NUMBER", PIIType.PASSPORT),
    ],
)
def test_known_labels(label, expected):
    assert map_label(label) == expected
    assert map_label(f"B-{label}") == expected
    assert map_label(f"I-{label}") == expected


@pytest.mark.parametrize("label", ["ORGANIZATION", "GIVENNAME", "O", "", "email_address"])
def test_unknown_labels_map_to_custom(label):
    assert map_label(label) == PIIType.CUSTOM


def test_strip_bio_prefix_only_strips_leading_tag():
    assert strip_bio_prefix("B-PERSON") == "PERSON"
    assert strip_bio_prefix("I-SSN") == "SSN"
    assert strip_bio_prefix("PERSON") == "PERSON"
    assert strip_bio_prefix("X-PERSON") == "X-PERSON"
    assert strip_bio_prefix("B-I-PERSON") == "I-PERSON"


def test_label_table_is_versioned():
    loader = PatternLoader.get_instance()
    assert loader.get_label_version() == 1
    assert len(loader.get_label_mapping()) == 9


@pytest.mark.parametrize(
    "pii_type,tag",
    [
        (PIIType.NAME, "NAME"),
        (PIIType.EMAIL, "EMAIL"),
        (PIIType.PHONE, "PHONE"),
        (PIIType.CREDIT_CARD, "CREDIT_CARD"),
        (PIIType.SSN, "SSN"),
        (PIIType.ADDRESS, "ADDRESS"),
        (PIIType.IP_ADDRESS, "IP_ADDRESS"),
        (PIIType.DATE_OF_BIRTH, "DATE_OF_BIRTH"),
        (PIIType.PASSPORT, "PASSPORT"),
        (PIIType.CUSTOM, "CUSTOM"),
        ("driverLicense", "UNKNOWN"),
    ],
)
def test_placeholder_names(pii_type, tag):
    assert placeholder_name(pii_type) == tag
