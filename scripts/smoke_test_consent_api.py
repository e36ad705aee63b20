#!/usr/bin/env python3
"""
Smoke test for a running consent gateway: health, generate, verify.

Start the API first (in another terminal), e.g. against the simulated AA network:
  INTEGRATIONS_MODE=mock python scripts/run_api.py

Then run this script:
  python scripts/smoke_test_consent_api.py
  python scripts/smoke_test_consent_api.py --base-url http://127.0.0.1:3002/finvu-aa --cust-id 9990001111@finvu

If you see "Connection refused", the API is not running; start it as above.
"""

from __future__ import annotations

import argparse
import sys
from typing import Any, Dict

import requests


def post_json(url: str, data: Dict[str, Any], timeout: int = 30) -> Dict[str, Any]:
    r = requests.post(url, json=data, timeout=timeout)
    r.raise_for_status()
    return r.json()


def get_json(url: str, timeout: int = 30) -> Dict[str, Any]:
    r = requests.get(url, timeout=timeout)
    r.raise_for_status()
    return r.json()


def main() -> int:
    parser = argparse.ArgumentParser(description="Smoke test the consent gateway (health, generate, verify)")
    parser.add_argument("--base-url", default="http://localhost:3002/finvu-aa", help="Gateway base URL")
    parser.add_argument("--cust-id", default="9990001111@finvu", help="Customer identifier")
    parser.add_argument("--transaction-id", default=None, help="Optional session key for verify")
    args = parser.parse_args()
    base = args.base_url.rstrip("/")

    print("=== Consent gateway smoke test ===\n")
    print(f"Base URL: {base}")
    print(f"Cust ID:  {args.cust_id}\n")

    print("1) GET /health")
    try:
        health = get_json(f"{base}/health")
        print(f"   status={health.get('status')} redis={health.get('dependencies', {}).get('redis')}\n")
    except requests.RequestException as e:
        print(f"   FAIL: {e}")
        if "Connection refused" in str(e) or "Failed to establish" in str(e):
            print("   -> Start the API first: python scripts/run_api.py")
        return 1

    print("2) POST /consent/generate")
    try:
        generated = post_json(f"{base}/consent/generate", {"custId": args.cust_id})
        handle = generated.get("consentHandler")
        print(f"   consentHandler: {handle}")
        print(f"   url: {str(generated.get('url'))[:100]}\n")
    except requests.RequestException as e:
        print(f"   FAIL: {e}")
        if getattr(e, "response", None) is not None:
            print(f"   body: {e.response.text[:500]}")
        return 1

    print("3) POST /consent/verify")
    verify_body: Dict[str, Any] = {"userId": args.cust_id, "consentHandles": [handle] if handle else []}
    if args.transaction_id:
        verify_body["transactionId"] = args.transaction_id
    try:
        verified = post_json(f"{base}/consent/verify", verify_body)
        print(f"   url: {str(verified.get('url'))[:100]}\n")
    except requests.RequestException as e:
        print(f"   FAIL: {e}")
        if getattr(e, "response", None) is not None:
            print(f"   body: {e.response.text[:500]}")
        return 1

    print("All steps passed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
