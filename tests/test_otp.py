"""Tests for OTP generation and keyed hashing."""

import hashlib
import hmac

from tilu_booking.security.otp import SecretCodec, generate_otp, generate_salt, hash_otp


def test_generate_otp_is_six_digits():
    for _ in range(200):
        otp = generate_otp()
        assert len(otp) == 6
        assert otp.isdigit()
        assert 100000 <= int(otp) <= 999999


def test_generate_salt_is_16_random_bytes():
    salt = generate_salt()
    assert len(bytes.fromhex(salt)) == 16
    assert generate_salt() != salt


def test_hash_otp_is_deterministic():
    salt = generate_salt()
    assert hash_otp("123456", salt) == hash_otp("123456", salt)
    assert len(hash_otp("123456", salt)) == 64


def test_hash_otp_is_hmac_sha256_keyed_with_salt():
    salt = "00ff" * 8
    expected = hmac.new(salt.encode(), b"123456", hashlib.sha256).hexdigest()
    assert hash_otp("123456", salt) == expected


def test_hash_otp_canonicalises_numeric_input():
    salt = generate_salt()
    assert hash_otp(123456, salt) == hash_otp("123456", salt)


def test_different_salts_give_different_digests():
    assert hash_otp("123456", generate_salt()) != hash_otp("123456", generate_salt())


def test_codec_matches():
    codec = SecretCodec()
    salt = codec.generate_salt()
    digest = codec.hash_otp("654321", salt)
    assert codec.matches("654321", salt, digest)
    assert not codec.matches("654322", salt, digest)
    assert not codec.matches("654321", codec.generate_salt(), digest)
