from datetime import timedelta

import pytest
from jose import JWTError

from goldapi.core.security import (
    create_access_token,
    decode_access_token,
    generate_password,
    hash_password,
    verify_password,
)


class TestPasswordHashing:
    def test_hash_and_verify(self):
        password_hash = hash_password("s3cret")

        assert password_hash.startswith("$2b$")
        assert verify_password("s3cret", password_hash) is True
        assert verify_password("wrong", password_hash) is False

    def test_hash_is_salted(self):
        assert hash_password("s3cret") != hash_password("s3cret")

    @pytest.mark.parametrize(
        "password_hash", ["", "plain-text", "md5$1$salt$hash", "pbkdf2_sha256$x$salt"]
    )
    def test_unknown_hash_format_is_rejected(self, password_hash):
        assert verify_password("s3cret", password_hash) is False

    def test_generated_password(self):
        password = generate_password()

        assert len(password) == 10
        assert password.isalnum()
        assert len(generate_password(16)) == 16


class TestAccessToken:
    def test_round_trip_payload(self):
        token = create_access_token({"user_id": 7, "role": "admin"})

        payload = decode_access_token(token)

        assert payload["user_id"] == 7
        assert payload["role"] == "admin"
        assert "exp" in payload

    def test_expired_token(self):
        token = create_access_token({"user_id": 7, "role": "user"}, timedelta(seconds=-10))

        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_tampered_token(self):
        token = create_access_token({"user_id": 7, "role": "user"})

        with pytest.raises(JWTError):
            decode_access_token(token + "x")
