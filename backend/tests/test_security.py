"""
Rutas Seguras Backend — Password & Token Tests
==============================================

What:  Tests for bcrypt hashing and HS256 token issue/verify.
Why:   Every protected endpoint trusts `verify_token`; it must fail closed.

What we test:
    ✅ Hash/verify round trip, wrong password, corrupt stored hash
    ✅ Token claims decode to the same id/email/role
    ✅ Expired tokens rejected even with a valid signature
    ✅ Any single-character signature change rejected
    ✅ Wrong secret, malformed strings and missing claims rejected
"""

import time
from uuid import uuid4

import jwt
import pytest

from rutas_seguras.config import settings
from rutas_seguras.security import (
    JWT_ALGORITHM,
    create_token,
    hash_password,
    verify_password,
    verify_token,
)


class TestPasswordHashing:

    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = hash_password("Secure1")
        assert hashed != "Secure1"
        assert hashed.startswith("$2")
        assert verify_password("Secure1", hashed) is True

    def test_wrong_password_does_not_verify(self):
        hashed = hash_password("Secure1")
        assert verify_password("secure1", hashed) is False

    def test_same_password_gets_distinct_salts(self):
        assert hash_password("Secure1") != hash_password("Secure1")

    def test_uses_configured_cost(self):
        hashed = hash_password("Secure1")
        # bcrypt format: $2b$<cost>$...
        assert int(hashed.split("$")[2]) == settings.bcrypt_rounds

    @pytest.mark.parametrize("stored", ["", "not-a-bcrypt-hash", "$2b$04$short"])
    def test_corrupt_stored_hash_returns_false(self, stored):
        assert verify_password("Secure1", stored) is False


class TestTokens:

    def test_round_trip_preserves_identity(self):
        user_id = uuid4()
        token = create_token(user_id, "ana@x.com", "conductor")

        claims = verify_token(token)

        assert claims is not None
        assert claims.id == user_id
        assert claims.email == "ana@x.com"
        assert claims.role == "conductor"
        assert claims.expires_at - claims.issued_at == settings.jwt_expiration_seconds

    def test_token_has_three_base64url_segments(self):
        token = create_token(uuid4(), "ana@x.com", "cliente")
        header, payload, signature = token.split(".")
        assert header and payload and signature
        assert "=" not in token

    def test_header_declares_hs256(self):
        token = create_token(uuid4(), "ana@x.com", "cliente")
        assert jwt.get_unverified_header(token)["alg"] == "HS256"

    def test_expired_token_is_rejected(self):
        token = create_token(uuid4(), "ana@x.com", "admin", expires_in=-10)
        assert verify_token(token) is None

    def test_expired_token_rejected_despite_valid_signature(self):
        now = int(time.time())
        payload = {
            "id": str(uuid4()),
            "email": "ana@x.com",
            "role": "admin",
            "iat": now - 7200,
            "exp": now - 3600,
        }
        token = jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)
        assert verify_token(token) is None

    def test_every_single_character_signature_change_is_rejected(self):
        token = create_token(uuid4(), "ana@x.com", "admin")
        head, body, signature = token.split(".")

        # The final character carries padding bits that may decode identically
        for i in range(len(signature) - 1):
            replacement = "A" if signature[i] != "A" else "B"
            tampered_sig = signature[:i] + replacement + signature[i + 1:]
            tampered = f"{head}.{body}.{tampered_sig}"
            assert verify_token(tampered) is None, f"accepted tampering at position {i}"

    def test_altered_payload_is_rejected(self):
        token = create_token(uuid4(), "ana@x.com", "cliente")
        forged = create_token(uuid4(), "ana@x.com", "admin")
        head, _, signature = token.split(".")
        _, forged_body, _ = forged.split(".")
        assert verify_token(f"{head}.{forged_body}.{signature}") is None

    def test_wrong_secret_is_rejected(self):
        token = create_token(uuid4(), "ana@x.com", "admin", secret="x" * 40)
        assert verify_token(token) is None

    @pytest.mark.parametrize(
        "token",
        [None, "", "garbage", "a.b", "a.b.c", "Bearer abc.def.ghi"],
    )
    def test_malformed_tokens_are_rejected(self, token):
        assert verify_token(token) is None

    def test_token_missing_role_claim_is_rejected(self):
        now = int(time.time())
        payload = {"id": str(uuid4()), "email": "ana@x.com", "iat": now, "exp": now + 60}
        token = jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)
        assert verify_token(token) is None

    def test_token_with_non_uuid_id_is_rejected(self):
        now = int(time.time())
        payload = {"id": "42", "email": "ana@x.com", "role": "admin", "iat": now, "exp": now + 60}
        token = jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)
        assert verify_token(token) is None

    def test_signature_stripped_token_is_rejected(self):
        head, body, _ = create_token(uuid4(), "ana@x.com", "admin").split(".")
        assert verify_token(f"{head}.{body}.") is None
