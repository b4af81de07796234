#!/usr/bin/env python3

import json
import sys

from paygate.services.webhook_verify import build_signature_header

if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: make_sig.py <secret> <payload> [<old_secret>]")
        sys.exit(1)

    secret = sys.argv[1]
    payload = sys.argv[2]

    # Validate payload is valid JSON
    try:
        json.loads(payload)
    except json.JSONDecodeError:
        print("Error: Payload must be valid JSON", file=sys.stderr)
        sys.exit(1)

    print(
        build_signature_header(
            payload.encode("utf-8"), secret, extra_secrets=sys.argv[3:4]
        )
    )
