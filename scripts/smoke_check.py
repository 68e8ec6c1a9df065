#!/usr/bin/env python3
import argparse
import dataclasses
import sys
import time

import httpx

from payfast_bridge.utils.signature import SIGNATURE_FIELD, generate_signature


@dataclasses.dataclass
class CheckResult:
    name: str
    passed: bool
    detail: str
    extra: str | None = None


def make_payment_payload(amount: str = "10.00") -> dict:
    return {
        "amount": amount,
        "itemName": "Smoke check item",
        "customerName": "Smoke Check",
        "customerEmail": "smoke@example.com",
    }


def run_health_check(client: httpx.Client, base_url: str) -> CheckResult:
    try:
        resp = client.get(f"{base_url}/health")
        if resp.status_code != 200:
            return CheckResult("Health Check", False, f"Expected 200, got {resp.status_code}")
        body = resp.json()
        if body.get("status") != "OK":
            return CheckResult("Health Check", False, f"Unexpected body: {body}")
        return CheckResult("Health Check", True, f"Service is up ({body.get('environment')})")
    except Exception as exc:  # noqa: BLE001
        return CheckResult("Health Check", False, f"Exception: {exc}")


def run_create_payment(client: httpx.Client, base_url: str, passphrase: str | None) -> CheckResult:
    try:
        resp = client.post(f"{base_url}/api/create-payment", json=make_payment_payload())
        if resp.status_code != 200:
            return CheckResult("Create Payment", False, f"Expected 200, got {resp.status_code}")
        body = resp.json()
        data = body.get("data") or {}
        if data.get("amount") != "10.00" or not data.get(SIGNATURE_FIELD):
            return CheckResult("Create Payment", False, f"Unexpected payment data: {data}")
        if passphrase is None:
            return CheckResult("Create Payment", True, f"Signed request for {data.get('m_payment_id')}")
        expected = generate_signature(data, passphrase)
        if expected != data[SIGNATURE_FIELD]:
            return CheckResult(
                "Create Payment",
                False,
                "Signature does not match local recomputation",
                f"expected={expected} got={data[SIGNATURE_FIELD]}",
            )
        return CheckResult("Create Payment", True, "Signature matches local recomputation", body.get("payfastUrl"))
    except Exception as exc:  # noqa: BLE001
        return CheckResult("Create Payment", False, f"Exception: {exc}")


def run_invalid_input(client: httpx.Client, base_url: str) -> CheckResult:
    try:
        resp = client.post(f"{base_url}/api/create-payment", json={"itemName": "Missing amount"})
        if resp.status_code != 400:
            return CheckResult("Invalid Input", False, f"Expected 400, got {resp.status_code}")
        return CheckResult("Invalid Input", True, f"Rejected with field={resp.json().get('field')}")
    except Exception as exc:  # noqa: BLE001
        return CheckResult("Invalid Input", False, f"Exception: {exc}")


def run_forged_notification(client: httpx.Client, base_url: str) -> CheckResult:
    forged = {
        "m_payment_id": "ORDER_0",
        "payment_status": "COMPLETE",
        "amount_gross": "10.00",
        SIGNATURE_FIELD: "0" * 32,
    }
    try:
        resp = client.post(f"{base_url}/api/payfast/notify", data=forged)
        if resp.status_code == 200:
            return CheckResult("Forged Notification", False, "Forged notification was acknowledged")
        return CheckResult("Forged Notification", True, f"Rejected with {resp.status_code}")
    except Exception as exc:  # noqa: BLE001
        return CheckResult("Forged Notification", False, f"Exception: {exc}")


def print_report(results: list[CheckResult], total_seconds: float) -> int:
    passed = sum(1 for r in results if r.passed)
    total = len(results)
    verdict = "PASS" if passed == total else "FAIL"
    print(f"RESULT: {verdict} ({passed} / {total} checks passed)\n")
    for res in results:
        state = "PASS" if res.passed else "FAIL"
        print(f"- {state} | {res.name}")
        print(f"  - {res.detail}")
        if res.extra:
            print(f"  - {res.extra}")
    print(f"\nTotal time: {total_seconds:.1f}s")
    return 0 if passed == total else 1


def main() -> int:
    parser = argparse.ArgumentParser(description="Smoke check a running PayFast bridge")
    parser.add_argument("--base-url", default="http://localhost:8000", help="Base URL of the bridge")
    parser.add_argument("--passphrase", default=None, help="Merchant passphrase, to recompute signatures locally")
    parser.add_argument("--request-timeout-seconds", type=float, default=10.0, help="HTTP request timeout")
    args = parser.parse_args()

    started = time.perf_counter()
    with httpx.Client(timeout=args.request_timeout_seconds) as client:
        results = [
            run_health_check(client, args.base_url),
            run_create_payment(client, args.base_url, args.passphrase),
            run_invalid_input(client, args.base_url),
            run_forged_notification(client, args.base_url),
        ]
    total = time.perf_counter() - started
    return print_report(results, total)


if __name__ == "__main__":
    sys.exit(main())
