"""
Command line entry point: `proof-of-riches`.

Subcommands:
    serve   Run the HTTP API with uvicorn
    slot    Print the storage slot holding a wallet's token balance
    verify  Structurally validate a proof artifact offline
"""
import argparse
import json
import logging
import os
import sys
from typing import List, Optional

import uvicorn

from .api.app import create_app
from .balance_proof import USDT_BALANCE_SLOT
from .config import DEFAULT_API_PORT, Settings
from .exceptions import InvalidInputError
from .models import ProofMetadata
from .oracle import derive_slot
from .validator import ProofValidator

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    level_name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="proof-of-riches",
        description="Paid, shareable proofs of token holdings"
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default: LOG_LEVEL or INFO)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", help="Bind address (default: API_HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, help=f"Bind port (default: API_PORT or {DEFAULT_API_PORT})")

    slot = subparsers.add_parser("slot", help="Derive the balance storage slot for a wallet")
    slot.add_argument("address", help="Wallet address")
    slot.add_argument(
        "--mapping-slot",
        type=int,
        default=USDT_BALANCE_SLOT,
        help="Storage index of the token's balances mapping (default: 2, USDT)"
    )

    verify = subparsers.add_parser("verify", help="Validate a proof artifact")
    verify.add_argument("--proof", required=True, help="0x-prefixed proof artifact")
    verify.add_argument("--public-inputs", required=True, help="0x-prefixed public inputs")
    verify.add_argument("--wallet", required=True, help="Wallet address")
    verify.add_argument("--token", required=True, help="Token contract address")

    return parser.parse_args(argv)


def _serve(args: argparse.Namespace) -> int:
    settings = Settings.from_env()
    host = args.host or settings.api_host
    port = args.port or settings.api_port
    logger.info(f"Serving proof API on {host}:{port}")
    uvicorn.run(create_app(settings), host=host, port=port)
    return 0


def _slot(args: argparse.Namespace) -> int:
    try:
        print(derive_slot(args.address, args.mapping_slot))
    except InvalidInputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    return 0


def _verify(args: argparse.Namespace) -> int:
    result = ProofValidator().validate(
        args.proof,
        args.public_inputs,
        args.wallet,
        args.token,
        metadata=ProofMetadata(),
    )
    print(json.dumps(result.to_response(), indent=2))
    return 0 if result.is_valid else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    configure_logging(args.log_level)

    handlers = {
        "serve": _serve,
        "slot": _slot,
        "verify": _verify,
    }
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
