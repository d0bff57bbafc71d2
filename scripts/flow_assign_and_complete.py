#!/usr/bin/env python3
"""
Dispatch flow script: assign a pending booking, confirm it as the driver and
complete the trip.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Usage:
    python scripts/flow_assign_and_complete.py --driver-email driver@example.com
    python scripts/flow_assign_and_complete.py --booking-id 1760000000000 --driver-email driver@example.com --password Secret123

Flow:
    1. List pending bookings (pick the first unless --booking-id is given)
    2. Assign the booking to the driver
    3. Log in as the driver (optional, when --password is given)
    4. Confirm the job as the driver
    5. Complete the job
    6. Show the driver's jobs
"""

import argparse
import json
import sys

import httpx

BASE_URL = "http://localhost:8000"


def api_request(method: str, endpoint: str, data: dict | None = None, token: str | None = None) -> dict:
    """Make an API request, optionally with a driver token."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    url = f"{BASE_URL}{endpoint}"

    if method == "GET":
        response = httpx.get(url, headers=headers, timeout=10.0, follow_redirects=True)
    elif method == "POST":
        response = httpx.post(url, headers=headers, json=data or {}, timeout=10.0, follow_redirects=True)
    else:
        raise ValueError(f"Unknown method: {method}")

    return {"status": response.status_code, "data": response.json() if response.text else {}}


def print_step(step: int, title: str):
    """Print step header."""
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def print_result(result: dict, fields: list[str] | None = None):
    """Print result, optionally filtering fields."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2)}")
        return False

    print(f"Status: {result['status']}")
    data = result["data"]
    if fields and isinstance(data, dict):
        data = {k: data.get(k) for k in fields if k in data}
    print(json.dumps(data, indent=2))
    return True


def main():
    parser = argparse.ArgumentParser(description="Assign, confirm and complete a booking")
    parser.add_argument("--driver-email", required=True, help="Driver email")
    parser.add_argument("--booking-id", help="Booking id (defaults to the first pending booking)")
    parser.add_argument("--password", help="Driver portal password, to send a bearer token")
    parser.add_argument("--skip-complete", action="store_true", help="Stop after the driver confirms")
    args = parser.parse_args()

    # Step 1: Pick a booking
    print_step(1, "List pending bookings")
    pending = api_request("GET", "/api/v1/jobs/pending")
    if pending["status"] >= 400:
        print_result(pending)
        sys.exit(1)

    print(f"{len(pending['data'])} pending booking(s)")
    booking_id = args.booking_id
    if not booking_id:
        if not pending["data"]:
            print("ERROR: No pending bookings")
            sys.exit(1)
        booking_id = pending["data"][0]["id"]
    print(f"Using booking {booking_id}")

    # Step 2: Assign
    print_step(2, "Assign booking to driver")
    assign_result = api_request("POST", "/api/v1/jobs/assign", {
        "bookingId": booking_id,
        "driverEmail": args.driver_email,
    })
    if not print_result(assign_result, ["jobId", "driverEmail", "driverPayout"]):
        sys.exit(1)

    # Step 3: Login
    token = None
    if args.password:
        print_step(3, "Login as driver")
        login_result = api_request("POST", "/api/v1/drivers/login", {
            "email": args.driver_email,
            "password": args.password,
        })
        if not print_result(login_result, ["success"]):
            sys.exit(1)
        token = login_result["data"]["accessToken"]

    # Step 4: Confirm
    print_step(4, "Confirm job (as driver)")
    confirm_result = api_request("POST", "/api/v1/jobs/driver-response", {
        "jobId": booking_id,
        "driverEmail": args.driver_email,
        "confirmed": True,
    }, token)
    if not print_result(confirm_result, ["jobId", "status"]):
        sys.exit(1)

    if args.skip_complete:
        print("\n" + "="*60)
        print("FLOW COMPLETE (skipped completion)")
        print("="*60)
        return

    # Step 5: Complete
    print_step(5, "Complete job")
    complete_result = api_request("POST", "/api/v1/jobs/complete", {
        "jobId": booking_id,
        "driverEmail": args.driver_email,
    }, token)
    if not print_result(complete_result, ["jobId", "status", "completedAt"]):
        sys.exit(1)

    # Step 6: Driver's jobs
    print_step(6, "Driver jobs")
    jobs_result = api_request("GET", f"/api/v1/jobs/driver?email={args.driver_email}", token=token)
    if not print_result(jobs_result):
        sys.exit(1)

    print("\n" + "="*60)
    print("FULL FLOW COMPLETE")
    print("="*60)
    print(f"Booking:       {booking_id}")
    print(f"Driver:        {args.driver_email}")
    print(f"Driver Payout: {assign_result['data']['driverPayout']}")


if __name__ == "__main__":
    main()
