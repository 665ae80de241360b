from __future__ import annotations

import pytest

from pyraksha._redact import coarsen_location, mask_phone, redact_for_log


def test_redact_for_log_masks_personal_data_at_depth() -> None:
    payload = {
        "userId": 7,
        "location": "FC Road, Shivajinagar, Pune",
        "alertedContacts": ["+919876543211", "+919876543212"],
        "x-goog-api-key": "secret",
        "nested": [{"phone": "+919876543211", "emergencyContacts": ["+919800000042"], "location": "Pune"}],
    }

    redacted = redact_for_log(payload)

    assert redacted["userId"] == 7
    assert redacted["location"] == "…, Pune"
    assert redacted["alertedContacts"] == ["+9*********11", "+9*********12"]
    assert redacted["x-goog-api-key"] == "<redacted>"
    assert redacted["nested"][0] == {
        "phone": "+9*********11",
        "emergencyContacts": ["+9*********42"],
        "location": "Pune",
    }


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Pune", "Pune"),
        ("Swargate bus stand, Pune", "…, Pune"),
        ("18.5204, 73.8567", "<coordinates>"),
    ],
)
def test_coarsen_location(value: str, expected: str) -> None:
    assert coarsen_location(value) == expected


def test_phone_numbers_in_free_text_are_masked() -> None:
    redacted = redact_for_log({"description": "Call my brother on 98765 43210 at 2026-10-19"})
    assert redacted["description"] == "Call my brother on 9*******10 at 2026-10-19"


def test_short_numbers_are_fully_masked() -> None:
    assert mask_phone("112") == "***"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_summarizes_bytes() -> None:
    assert redact_for_log({"body": b"abc"}) == {"body": "<bytes:3b>"}
