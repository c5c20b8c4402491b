"""
Integration test script — hits the Explorer API endpoints and verifies responses.

Usage:
    python -m artvista.scripts.fake_proxy_server                        (terminal 1)
    CAMERA_ADAPTER=mock uvicorn artvista.services.api:app --port 8000   (terminal 2)
    python -m artvista.scripts.integration_test                          (terminal 3)

Needs at least one sample image in artvista/assets/samples (or pass --image).
"""

import argparse
import base64
import os
import sys
import httpx

BASE = os.getenv("ARTVISTA_API_URL", "http://localhost:8000")
ADMIN = os.getenv("ARTVISTA_ADMIN_PASSWORD", "artmuseum123")
TIMEOUT = 60.0
passed = 0
failed = 0


def test(name: str, method: str, path: str, body: dict | None = None, checks: dict | None = None,
         headers: dict | None = None, expect_status: int = 200):
    global passed, failed
    url = f"{BASE}{path}"
    checks = checks or {}
    try:
        if method == "GET":
            r = httpx.get(url, timeout=TIMEOUT, headers=headers)
        else:
            r = httpx.post(url, json=body or {}, timeout=TIMEOUT, headers=headers)

        if r.status_code != expect_status:
            print(f"  FAIL  {name} — HTTP {r.status_code}")
            failed += 1
            return None

        data = r.json()
        for key, expected in checks.items():
            actual = data.get(key)
            if actual != expected:
                print(f"  FAIL  {name} — {key}: expected {expected!r}, got {actual!r}")
                failed += 1
                return data

        print(f"  OK    {name}")
        passed += 1
        return data

    except httpx.ConnectError:
        print(f"  FAIL  {name} — connection refused (is the server running?)")
        failed += 1
    except Exception as e:
        print(f"  FAIL  {name} — {type(e).__name__}: {e}")
        failed += 1
    return None


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--image", help="JPEG/PNG to upload instead of using the server camera")
    args = parser.parse_args()

    capture_body = {}
    if args.image:
        with open(args.image, "rb") as f:
            capture_body["image"] = base64.b64encode(f.read()).decode("ascii")

    print(f"\nIntegration tests against {BASE}\n")
    print("--- Health & Status ---")
    test("GET /health", "GET", "/health", None, {"api": True})
    test("GET /status", "GET", "/status")

    print("\n--- Capture ---")
    test("POST /capture (online)", "POST", "/capture", dict(capture_body, online=True), {"ok": True})

    print("\n--- Narration ---")
    test("POST /narrate", "POST", "/narrate", {"online": False}, {"ok": True})
    test("POST /narrate/stop", "POST", "/narrate/stop", {}, {"ok": True, "playing": False})

    print("\n--- Offline capture ---")
    data = test("POST /capture (offline)", "POST", "/capture", dict(capture_body, online=False))
    if data and data.get("prediction"):
        print(f"        offline source={data['prediction']['source']}")
    test("POST /capture (bad image)", "POST", "/capture", {"image": "not-an-image"}, expect_status=400)

    print("\n--- Admin ---")
    test("GET /admin/activity (no password)", "GET", "/admin/activity", expect_status=401)
    test("GET /admin/activity", "GET", "/admin/activity", headers={"X-Admin-Password": ADMIN})

    print("\n--- Final Status ---")
    test("GET /status (final)", "GET", "/status")

    total = passed + failed
    print(f"\n{'='*40}")
    print(f"  {passed}/{total} passed, {failed} failed")
    print(f"{'='*40}\n")

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
