#!/usr/bin/env python3
import os, sys, json, pathlib

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stampqr.errors import StampError
from stampqr.services.tokens import TokenCodec

# Usage: python scripts/check_token.py <TOKEN> [AUDIENCE]
# Verifies a token with JWT_SECRET from env and prints its claims.

if len(sys.argv) < 2:
    print("Usage: check_token.py <TOKEN> [AUDIENCE]")
    sys.exit(1)

codec = TokenCodec(os.environ.get('JWT_SECRET'), issuer=os.environ.get('JWT_ISSUER', 'go-out-loyalty'))
audience = sys.argv[2] if len(sys.argv) > 2 else None

try:
    claims = codec.decode(sys.argv[1].strip(), audience=audience)
except StampError as e:
    print(f"ERROR: {e.code}: {e.message}")
    sys.exit(1)

print(json.dumps(claims, indent=2, sort_keys=True))
