import pytest

from shiftly.shared.validators import (
    validate_email,
    validate_password,
    validate_time_of_day,
    validate_timezone,
    validate_uuid,
)


@pytest.mark.parametrize(
    "password, valid",
    [
        ("Sh1ft!ok", True),
        ("sh1ft!ok", False),
        ("SH1FT!OK", False),
        ("Shift!ok", False),
        ("Sh1ftok9", False),
        ("S1!a", False),
        ("", False),
        (None, False),
    ],
)
def test_validate_password(password, valid):
    assert validate_password(password) is valid


def test_validate_email_normalizes():
    assert validate_email("  Alice@Example.COM ") == "alice@example.com"
    with pytest.raises(ValueError):
        validate_email("alice@")


def test_validate_uuid():
    assert validate_uuid("1b4e28ba-2fa1-11d2-883f-0016d3cca427")
    assert not validate_uuid("not-a-token")
    assert not validate_uuid(None)


def test_time_of_day_and_timezone():
    assert validate_time_of_day("23:30") == "23:30"
    with pytest.raises(ValueError):
        validate_time_of_day("24:00")
    assert validate_timezone(" America/Vancouver ") == "America/Vancouver"
    with pytest.raises(ValueError):
        validate_timezone("Mars/Olympus")
