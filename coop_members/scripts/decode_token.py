"""
Verify a capability token and print its claims. Run from project root:
  python -m coop_members.scripts.decode_token TOKEN
  echo TOKEN | python -m coop_members.scripts.decode_token
Exits 1 if the token does not verify against the configured JWT_SECRET.
"""
import argparse
import json
import sys
from datetime import UTC, datetime

import jwt

from coop_members.core.exceptions import InvalidToken
from coop_members.core.tokens import CapabilityIssuer, get_issuer


def describe(token: str, issuer: CapabilityIssuer) -> dict:
    """Verified claims plus iat/exp rendered as ISO timestamps."""
    identity = issuer.verify(token)
    claims = jwt.decode(token, options={"verify_signature": False})
    out = {"member_id": identity.subject_id, "role": identity.role, "aud": claims.get("aud")}
    for key in ("iat", "exp"):
        if isinstance(claims.get(key), (int, float)):
            out[key] = claims[key]
            out[f"{key}_readable"] = datetime.fromtimestamp(claims[key], UTC).isoformat()
    return out


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Verify and decode a capability token.")
    parser.add_argument("token", nargs="?", help="Token; read from stdin when omitted")
    args = parser.parse_args(argv)

    token = (args.token or sys.stdin.read()).strip()
    if not token:
        print("No token given.", file=sys.stderr)
        return 1
    try:
        payload = describe(token, get_issuer())
    except InvalidToken as e:
        print(e.message, file=sys.stderr)
        return 1
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
