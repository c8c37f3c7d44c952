from datetime import datetime, timezone

from app.services.certificate import generate_serial

ISSUED_AT = datetime(2026, 5, 17, 12, 30, tzinfo=timezone.utc)


def test_serial_is_64_hex_chars():
    serial = generate_serial(1, 2, ISSUED_AT, secret_key="k")
    assert len(serial) == 64
    int(serial, 16)


def test_serial_is_deterministic_for_same_inputs():
    assert generate_serial(1, 2, ISSUED_AT, secret_key="k") == generate_serial(1, 2, ISSUED_AT, secret_key="k")


def test_serial_depends_on_every_input():
    base = generate_serial(1, 2, ISSUED_AT, secret_key="k")
    assert generate_serial(2, 2, ISSUED_AT, secret_key="k") != base
    assert generate_serial(1, 3, ISSUED_AT, secret_key="k") != base
    assert generate_serial(1, 2, ISSUED_AT.replace(second=1), secret_key="k") != base
    assert generate_serial(1, 2, ISSUED_AT, secret_key="other") != base
