#!/usr/bin/env python3
"""
Simple example of issuing and verifying a proof through a running service.
"""
import os
import json
import sys

import requests


def main():
    """
    Demonstrate the paid proof flow.

    This example shows how to:
    1. Request a proof for a wallet that has already paid the service
    2. Verify the returned artifact
    """
    # Read configuration from environment
    API_URL = os.environ.get("PROOF_API_URL", "http://localhost:3001")
    WALLET = os.environ.get("WALLET")
    TOKEN = os.environ.get("TOKEN")
    TX_HASH = os.environ.get("PAYMENT_TX_HASH")
    MIN_AMOUNT = os.environ.get("MIN_AMOUNT", "1000")

    if not WALLET or not TOKEN or not TX_HASH:
        print("ERROR: WALLET, TOKEN and PAYMENT_TX_HASH environment variables are required")
        return 1

    response = requests.post(
        f"{API_URL}/api/proofs/generate-proof",
        json={
            "wallet": WALLET,
            "token": TOKEN,
            "minAmount": MIN_AMOUNT,
            "txHash": TX_HASH,
            "tokenSymbol": "USDC",
        },
        timeout=150
    )
    issued = response.json()
    if response.status_code != 200:
        print(f"Proof generation failed ({response.status_code}): {issued.get('error')}")
        return 1

    print(f"Verification code: {issued['verificationCode']}")
    print(f"Share id: {issued['shareId']} (prover: {issued['proverMode']})")

    response = requests.post(
        f"{API_URL}/api/proofs/verify-proof",
        json={
            "proof": issued["proof"],
            "publicInputs": issued["publicInputs"],
            "wallet": issued["wallet"],
            "minAmount": issued["minAmount"],
            "token": issued["token"],
        },
        timeout=30
    )
    print(json.dumps(response.json(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
