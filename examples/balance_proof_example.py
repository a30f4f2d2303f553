#!/usr/bin/env python3
"""
Example of generating a USDT storage proof in-process, without the HTTP layer.

Reads ETHEREUM_RPC_URL (default: a public mainnet endpoint).
"""
import argparse
import logging
import sys

from proof_of_riches import BalanceOracle, BalanceProofService, NetworkResolver, ProofStore, Settings
from proof_of_riches.exceptions import ProofOfRichesError

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


def parse_arguments():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Prove a wallet holds at least N USDT")
    parser.add_argument("wallet", help="Wallet address")
    parser.add_argument("min_usdt", type=int, help="Minimum balance in whole USDT")
    return parser.parse_args()


def main():
    args = parse_arguments()
    settings = Settings.from_env()
    resolver = NetworkResolver(settings)
    service = BalanceProofService(
        settings=settings,
        oracle=BalanceOracle(resolver, rpc_url=settings.balance_proof_rpc_url),
        store=ProofStore(),
    )

    try:
        record = service.generate(args.wallet, args.min_usdt)
    except ProofOfRichesError as e:
        logger.error(f"Balance proof failed: {e}")
        return 1

    print(record.claim_text)
    print(service.success_message(record))
    print(f"Block: {record.storage_proof.block_number}")
    print(f"Slot: {record.storage_proof.storage_slot_hash}")
    print(f"Proof nodes: {len(record.storage_proof.merkle_path)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
