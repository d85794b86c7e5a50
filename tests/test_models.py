import pytest

from calculator.models import FeedbackEntry, is_valid_email


@pytest.mark.parametrize("value", [
    "user@example.com",
    "user.name@example.com",
    "user+tag@example.co.uk",
])
def test_valid_email_addresses(value):
    assert is_valid_email(value)


@pytest.mark.parametrize("value", [
    "",
    "invalid",
    "invalid@",
    "@example.com",
    "invalid@.com",
    "invalid..email@example.com",
    "user@example",
])
def test_invalid_email_addresses(value):
    assert not is_valid_email(value)


def test_feedback_entry_strips_fields():
    entry = FeedbackEntry.from_json({"name": "  Jane ", "email": " jane@example.com ", "message": " Hi "})
    assert (entry.name, entry.email, entry.message) == ("Jane", "jane@example.com", "Hi")
    entry.validate()


def test_feedback_entry_ignores_null_fields():
    entry = FeedbackEntry.from_json({"name": None, "email": None, "message": None})
    with pytest.raises(ValueError, match="Name cannot be empty"):
        entry.validate()


def test_feedback_entry_checks_email_before_message():
    entry = FeedbackEntry(name="Jane", email="jane@", message="")
    with pytest.raises(ValueError, match="Please enter a valid email address"):
        entry.validate()
