# tests/test_otp_utils.py

"""Code generation, hashing and expiry helpers."""

from collections import Counter
from datetime import datetime, timedelta

from mrkim.core import otp as otp_utils
from mrkim.core.config import settings


def test_generated_codes_are_six_digits_in_range():
    codes = [otp_utils.generate_otp() for _ in range(10_000)]

    for code in codes:
        assert len(code) == 6
        assert code.isdigit()
        assert otp_utils.OTP_MIN <= int(code) <= otp_utils.OTP_MAX


def test_generated_codes_are_roughly_uniform():
    # Leading digit 1-9 should each take about a ninth of the draws
    counts = Counter(otp_utils.generate_otp()[0] for _ in range(10_000))

    assert set(counts) == set("123456789")
    for digit, count in counts.items():
        assert 900 <= count <= 1330, f"leading digit {digit} drawn {count} times"


def test_hash_verifies_only_the_original_code():
    code = "482913"
    code_hash = otp_utils.hash_otp(code)

    assert code_hash != code
    assert otp_utils.verify_otp_hash(code, code_hash)
    for other in ("482914", "100000", "999999", "284913"):
        assert not otp_utils.verify_otp_hash(other, code_hash)


def test_hash_is_salted_per_call():
    first = otp_utils.hash_otp("123456")
    second = otp_utils.hash_otp("123456")

    assert first != second
    assert otp_utils.verify_otp_hash("123456", first)
    assert otp_utils.verify_otp_hash("123456", second)


def test_hash_uses_configured_cost():
    assert otp_utils.hash_otp("654321").startswith(f"$2b${settings.OTP_HASH_ROUNDS:02d}$")


def test_expiration_is_ten_minutes_after_now():
    now = datetime(2025, 1, 1, 12, 0, 0)

    assert otp_utils.otp_expiration(now) == now + timedelta(minutes=10)


def test_expiration_defaults_to_the_otp_clock(monkeypatch):
    frozen = datetime(2025, 6, 1, 8, 30, 0)
    monkeypatch.setattr(otp_utils, "utcnow", lambda: frozen)

    assert otp_utils.otp_expiration() == frozen + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
