"""Unit tests for coop_members.core.tokens: capability issue/verify, expiry and tampering."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt

from coop_members.core.exceptions import InvalidToken
from coop_members.core.tokens import (
    ADMIN_ROLE,
    MEMBER_ROLE,
    CapabilityIssuer,
    Identity,
)

SECRET = "unit-test-signing-key"


def _issuer(**kwargs: object) -> CapabilityIssuer:
    return CapabilityIssuer(secret=kwargs.pop("secret", SECRET), **kwargs)


def _alter_char(token: str, index: int) -> str:
    replacement = "A" if token[index] != "A" else "B"
    return token[:index] + replacement + token[index + 1 :]


class TestIssue(unittest.TestCase):
    """issue() signs member_id and role with the configured audience."""

    def test_round_trip_member(self) -> None:
        issuer = _issuer()
        capability = issuer.issue(7, MEMBER_ROLE)
        self.assertEqual(capability.subject_id, 7)
        self.assertEqual(capability.role, MEMBER_ROLE)
        self.assertEqual(issuer.verify(capability.token), Identity(subject_id=7, role=MEMBER_ROLE))

    def test_round_trip_admin(self) -> None:
        issuer = _issuer()
        capability = issuer.issue(1, ADMIN_ROLE)
        self.assertEqual(issuer.verify(capability.token), Identity(subject_id=1, role=ADMIN_ROLE))

    def test_claims_layout(self) -> None:
        capability = _issuer(audience="coop").issue(3, MEMBER_ROLE)
        claims = jwt.decode(capability.token, options={"verify_signature": False})
        self.assertEqual(claims["member_id"], 3)
        self.assertEqual(claims["sub"], "3")
        self.assertEqual(claims["role"], MEMBER_ROLE)
        self.assertEqual(claims["aud"], "coop")
        self.assertIn("iat", claims)

    def test_no_lifetime_means_no_exp(self) -> None:
        capability = _issuer().issue(3, MEMBER_ROLE)
        claims = jwt.decode(capability.token, options={"verify_signature": False})
        self.assertNotIn("exp", claims)
        self.assertIsNone(capability.expires_at)

    def test_lifetime_sets_expiry(self) -> None:
        now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
        capability = _issuer(lifetime=timedelta(minutes=30)).issue(3, MEMBER_ROLE, now=now)
        self.assertEqual(capability.issued_at, now)
        self.assertEqual(capability.expires_at, now + timedelta(minutes=30))

    def test_rejects_unknown_role(self) -> None:
        with self.assertRaises(ValueError):
            _issuer().issue(3, "superuser")

    def test_rejects_empty_secret(self) -> None:
        with self.assertRaises(ValueError):
            CapabilityIssuer(secret="")


class TestVerifyRejects(unittest.TestCase):
    """verify() raises InvalidToken for every kind of bad token, with one message."""

    def test_expired_token(self) -> None:
        issuer = _issuer(lifetime=timedelta(hours=1))
        issued = datetime.now(UTC) - timedelta(hours=2)
        capability = issuer.issue(5, MEMBER_ROLE, now=issued)
        with self.assertRaises(InvalidToken):
            issuer.verify(capability.token)

    def test_unexpired_token_with_lifetime(self) -> None:
        issuer = _issuer(lifetime=timedelta(hours=1))
        capability = issuer.issue(5, MEMBER_ROLE)
        self.assertEqual(issuer.verify(capability.token).subject_id, 5)

    def test_altered_payload_byte(self) -> None:
        issuer = _issuer()
        token = issuer.issue(5, MEMBER_ROLE).token
        header, payload, signature = token.split(".")
        altered = ".".join([header, _alter_char(payload, len(payload) // 2), signature])
        with self.assertRaises(InvalidToken):
            issuer.verify(altered)

    def test_altered_signature_byte(self) -> None:
        issuer = _issuer()
        token = issuer.issue(5, MEMBER_ROLE).token
        header, payload, signature = token.split(".")
        altered = ".".join([header, payload, _alter_char(signature, 3)])
        with self.assertRaises(InvalidToken):
            issuer.verify(altered)

    def test_rotated_key_invalidates_tokens(self) -> None:
        token = _issuer().issue(5, MEMBER_ROLE).token
        with self.assertRaises(InvalidToken):
            _issuer(secret="rotated-signing-key").verify(token)

    def test_wrong_audience(self) -> None:
        token = _issuer(audience="other").issue(5, MEMBER_ROLE).token
        with self.assertRaises(InvalidToken):
            _issuer().verify(token)

    def test_garbage(self) -> None:
        with self.assertRaises(InvalidToken):
            _issuer().verify("not.a.token")

    def test_signed_token_with_unknown_role(self) -> None:
        issuer = _issuer()
        token = jwt.encode(
            {"sub": "5", "member_id": 5, "role": "superuser", "aud": issuer.audience, "iat": datetime.now(UTC)},
            SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(InvalidToken):
            issuer.verify(token)

    def test_signed_token_with_mismatched_subject(self) -> None:
        issuer = _issuer()
        token = jwt.encode(
            {"sub": "6", "member_id": 5, "role": MEMBER_ROLE, "aud": issuer.audience, "iat": datetime.now(UTC)},
            SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(InvalidToken):
            issuer.verify(token)

    def test_failures_share_one_message(self) -> None:
        issuer = _issuer(lifetime=timedelta(hours=1))
        expired = issuer.issue(5, MEMBER_ROLE, now=datetime.now(UTC) - timedelta(hours=2)).token
        messages = set()
        for bad in (expired, "garbage", _issuer(secret="x").issue(5, MEMBER_ROLE).token):
            with self.assertRaises(InvalidToken) as ctx:
                issuer.verify(bad)
            messages.add(ctx.exception.message)
        self.assertEqual(len(messages), 1)


if __name__ == "__main__":
    unittest.main()
