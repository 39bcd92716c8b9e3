#!/usr/bin/env python3
"""
Build, alter and dry-run transactions against the Nile testnet.

Builds an unsigned TRX transfer anchored to Nile's latest block, attaches a
memo, then reads a TRC-20 balance with a constant call. Nothing is signed
or broadcast.

Set TRON_PRO_API_KEY in .env to use a TronGrid API key.

Run with: python examples/build_transfer.py
"""

import asyncio
import json
import os

from dotenv import load_dotenv

from trontx import TransactionBuilder, get_node_config
from trontx.config import Network
from trontx.node import HttpLedgerNodeClient
from trontx.utils.logging import configure_logging

SENDER = "TNPeeaaFB7K9cmo4uQpcU32zGK8G1NYqeL"
RECIPIENT = "TVDGpn4hCSzJ5nkHPLetk8KQBtwaTppnkr"
# USDT on Nile
TOKEN_CONTRACT = "TXYZopYRdj2D9XRtbG411XZZ3kM5VkAeBf"


async def main() -> None:
    load_dotenv()
    configure_logging("INFO")

    config = get_node_config(Network.NILE, api_key=os.getenv("TRON_PRO_API_KEY"))
    node = HttpLedgerNodeClient(config)
    builder = TransactionBuilder(node, options={"default_address": SENDER})

    print("=" * 60)
    print("Step 1: Building a 1 TRX transfer...")
    envelope = await builder.send_trx(RECIPIENT, 1_000_000)
    print(f"  txID:       {envelope.tx_id}")
    print(f"  expiration: {envelope.expiration}")

    print()
    print("Step 2: Attaching a memo and extending the expiration...")
    altered = builder.alter_transaction(envelope, data="invoice 42", extension=300)
    print(f"  txID:       {altered.tx_id}")
    print(f"  expiration: {altered.expiration}")

    print()
    print("Step 3: Reading a TRC-20 balance...")
    result = await builder.trigger_constant_contract(
        TOKEN_CONTRACT,
        "balanceOf(address)",
        [{"type": "address", "value": SENDER}],
    )
    balance = int.from_bytes(result.result_bytes, "big") if result.success else None
    print(f"  balance:     {balance}")
    print(f"  energy used: {result.energy_used}")

    print()
    print("Unsigned transaction:")
    print(json.dumps(altered.to_dict(), indent=2))


if __name__ == "__main__":
    asyncio.run(main())
