#!/usr/bin/env python3
"""
End-to-end smoke run against a live server.

Registers two staff users, logs in, registers an incoming letter with an
attachment, and checks ownership rules. Set ADMIN_EMAIL / ADMIN_PASSWORD to the
bootstrap admin configured on the server to include the admin checks.

Not collected by pytest; run by hand: python e2e_smoke.py
"""

import os
import sys
import time

import requests
from urllib3.exceptions import InsecureRequestWarning

# Self-signed certificates in local setups
requests.packages.urllib3.disable_warnings(InsecureRequestWarning)

BASE_URL = os.getenv("BASE_URL", "http://localhost:8000")
SESSION = requests.Session()
SESSION.verify = False


def check(ok: bool, message: str) -> bool:
    print(f"{'✓' if ok else '✗'} {message}")
    return ok


def login(email: str, password: str) -> dict:
    resp = SESSION.post(f"{BASE_URL}/auth/login", json={"email": email, "password": password}, timeout=5)
    resp.raise_for_status()
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def main():
    print("\n" + "=" * 60)
    print("INCOMING LETTERS SMOKE TEST")
    print("=" * 60)
    print(f"Base URL: {BASE_URL}\n")

    timestamp = int(time.time())
    password = "SmokeTest12345"
    alice_email = f"alice_{timestamp}@test.com"
    bob_email = f"bob_{timestamp}@test.com"
    failures = 0

    print("STEP 0: Health check")
    try:
        resp = SESSION.get(f"{BASE_URL}/health", timeout=5)
        check(resp.status_code == 200, f"Backend alive: {resp.status_code}\n")
    except requests.RequestException as e:
        print(f"✗ Backend offline: {e}\n")
        sys.exit(1)

    print("STEP 1: Register staff users Alice and Bob")
    for name, email in (("Alice", alice_email), ("Bob", bob_email)):
        resp = SESSION.post(
            f"{BASE_URL}/auth/register",
            json={"name": name, "email": email, "password": password},
            timeout=5,
        )
        failures += not check(resp.status_code == 201, f"Register {name}: {resp.status_code}")

    alice = login(alice_email, password)
    bob = login(bob_email, password)

    print("\nSTEP 2: Alice registers an incoming letter")
    reference = f"REF/{timestamp}"
    resp = SESSION.post(
        f"{BASE_URL}/incoming",
        headers=alice,
        data={
            "type": "incoming",
            "reference_number": reference,
            "agenda_number": "001",
            "sender": "Ministry of Works",
            "letter_date": "2026-01-05",
            "received_date": "2026-01-06",
            "description": "Smoke test letter",
            "classification_code": "STAFF",
        },
        files=[("attachments", ("scan one.pdf", b"%PDF-1.4 smoke", "application/pdf"))],
        allow_redirects=False,
        timeout=10,
    )
    failures += not check(resp.status_code == 302, f"Create redirected: {resp.headers.get('location')}")

    resp = SESSION.get(f"{BASE_URL}/incoming", headers=alice, params={"search": reference}, timeout=5)
    failures += not check(reference in resp.text, "Letter visible in Alice's list")

    resp = SESSION.get(f"{BASE_URL}/incoming", headers=bob, params={"search": reference}, timeout=5)
    failures += not check(reference not in resp.text, "Letter hidden from Bob's list")

    admin_email = os.getenv("ADMIN_EMAIL")
    admin_password = os.getenv("ADMIN_PASSWORD")
    if admin_email and admin_password:
        print("\nSTEP 3: Admin sees every letter")
        admin = login(admin_email, admin_password)
        resp = SESSION.get(f"{BASE_URL}/incoming/print", headers=admin, timeout=5)
        failures += not check(reference in resp.text, "Letter on the admin's printed agenda")

    print("\n" + "=" * 60)
    print("ALL CHECKS PASSED" if not failures else f"{failures} CHECK(S) FAILED")
    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
