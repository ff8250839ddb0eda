"""Identifier Codec — round-trip, randomized tokens, tamper detection.

Tests:
    - decrypt(encrypt(x)) == x, including unicode
    - Two encryptions of the same value differ
    - Truncated, tampered, empty or foreign-key tokens raise DecodeError
    - Plain passphrases and generated Fernet keys both work as secrets
"""

import pytest
from cryptography.fernet import Fernet

from oneclick.core.errors import DecodeError, ErrorCode
from oneclick.core.identifier_codec import IdentifierCodec

INSCRIPTION_ID = "0b8a3d1c-3f2e-4c55-8f7e-1a2b3c4d5e6f"


@pytest.fixture
def codec():
    return IdentifierCodec("correct horse battery staple")


def test_round_trip(codec):
    assert codec.decrypt(codec.encrypt(INSCRIPTION_ID)) == INSCRIPTION_ID


def test_round_trip_unicode(codec):
    assert codec.decrypt(codec.encrypt("inscripción-ñ")) == "inscripción-ñ"


def test_same_plaintext_gives_different_tokens(codec):
    assert codec.encrypt(INSCRIPTION_ID) != codec.encrypt(INSCRIPTION_ID)


def test_token_is_url_path_safe(codec):
    token = codec.encrypt(INSCRIPTION_ID)
    assert "/" not in token
    assert "?" not in token
    assert "+" not in token


def test_truncated_token_is_rejected(codec):
    token = codec.encrypt(INSCRIPTION_ID)
    with pytest.raises(DecodeError) as exc_info:
        codec.decrypt(token[:-10])
    assert exc_info.value.code == ErrorCode.INVALID_HASH


def test_tampered_token_is_rejected(codec):
    token = codec.encrypt(INSCRIPTION_ID)
    middle = len(token) // 2
    flipped = "A" if token[middle] != "A" else "B"
    with pytest.raises(DecodeError):
        codec.decrypt(token[:middle] + flipped + token[middle + 1:])


def test_empty_token_is_rejected(codec):
    with pytest.raises(DecodeError):
        codec.decrypt("")


def test_garbage_token_is_rejected(codec):
    with pytest.raises(DecodeError):
        codec.decrypt("not a token at all")


def test_token_from_other_secret_is_rejected(codec):
    foreign = IdentifierCodec("another secret").encrypt(INSCRIPTION_ID)
    with pytest.raises(DecodeError):
        codec.decrypt(foreign)


def test_fernet_key_secret_is_used_as_is():
    key = Fernet.generate_key().decode()
    token = IdentifierCodec(key).encrypt(INSCRIPTION_ID)
    assert Fernet(key).decrypt(token).decode() == INSCRIPTION_ID


def test_same_secret_decodes_across_instances():
    token = IdentifierCodec("shared").encrypt(INSCRIPTION_ID)
    assert IdentifierCodec("shared").decrypt(token) == INSCRIPTION_ID


def test_empty_secret_generates_process_local_key():
    token = IdentifierCodec().encrypt(INSCRIPTION_ID)
    with pytest.raises(DecodeError):
        IdentifierCodec().decrypt(token)
