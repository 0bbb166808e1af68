"""Connect to a data pipe peer, print what it sends, optionally send a message.

Usage:
    uv run python examples/echo_pipe.py AA:BB:CC:DD:EE:FF --duration 30
    uv run python examples/echo_pipe.py AA:BB:CC:DD:EE:FF --json '{"cmd": "status"}'
    uv run python examples/echo_pipe.py AA:BB:CC:DD:EE:FF --binary 5 --size 500 --indicate
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from collections import Counter
from datetime import datetime
from typing import Any

from datapipe import DataPipe, DeliveryMode, PipeConfig


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


async def run(args: argparse.Namespace) -> None:
    """Open the pipe, send the requested message and print incoming ones."""
    received: Counter[str] = Counter()

    def on_json(document: Any) -> None:
        received["json"] += 1
        print(f"[{_timestamp()}] JSON {json.dumps(document)}")

    def on_binary(message_type: int, data: bytes) -> None:
        received[f"0x{message_type:02x}"] += 1
        preview = data[:16].hex()
        suffix = "..." if len(data) > 16 else ""
        print(f"[{_timestamp()}] BINARY type=0x{message_type:02x} len={len(data)} data={preview}{suffix}")

    mode = DeliveryMode.CONFIRMED if args.indicate else DeliveryMode.UNCONFIRMED
    pipe = DataPipe(args.address, config=PipeConfig(delivery_mode=mode), auto_reconnect=True)
    pipe.set_on_json(on_json)
    pipe.set_on_binary(on_binary)

    async with pipe:
        print(f"Connected to {args.address} (MTU={pipe.mtu}, mode={mode.name})")

        if args.json is not None:
            sent = await pipe.send_json(json.loads(args.json))
            print(f"Sent JSON: {'ok' if sent else 'dropped'}")
        if args.binary is not None:
            payload = bytes(i & 0xFF for i in range(args.size))
            sent = await pipe.send_binary(args.binary, payload)
            print(f"Sent {len(payload)} bytes as type 0x{args.binary:02x}: {'ok' if sent else 'dropped'}")

        if args.duration > 0:
            await asyncio.sleep(args.duration)
        else:
            while True:
                await asyncio.sleep(1)

    print("\nSummary:")
    print(f"  messages_received={dict(received)}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Exchange JSON and binary messages with a BLE data pipe peer."
    )
    parser.add_argument("address", help="Peer MAC address")
    parser.add_argument(
        "--duration",
        type=float,
        default=30.0,
        help="Listen duration in seconds (0 = run until Ctrl+C). Default: 30",
    )
    parser.add_argument("--json", help="JSON document to send after connecting.")
    parser.add_argument(
        "--binary",
        type=lambda value: int(value, 0),
        help="Send a binary message with this type tag (1-255).",
    )
    parser.add_argument(
        "--size",
        type=int,
        default=64,
        help="Binary payload size in bytes. Default: 64",
    )
    parser.add_argument(
        "--indicate",
        action="store_true",
        help="Use confirmed delivery (default: unconfirmed, throttled).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
