"""Command-line helpers that query a running bridge over HTTP."""

from __future__ import annotations

import argparse
import asyncio
import base64
import json
import sys
from pathlib import Path
from typing import Any, Optional

import httpx

from ..config import WA_BRIDGE_URL

DATA_URL_PREFIX = "data:image/png;base64,"


async def _call_bridge(
    path: str,
    base_url: str = WA_BRIDGE_URL,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Any:
    """GET a bridge endpoint. Failures come back as ``{"error": ...}``."""
    url = f"{base_url.rstrip('/')}{path}"
    try:
        async with httpx.AsyncClient(timeout=30.0, transport=transport) as client:
            resp = await client.get(url)

            if resp.status_code >= 400:
                try:
                    data = resp.json()
                except ValueError:
                    data = None
                if not isinstance(data, dict):
                    data = {}
                return {"error": data.get("error", f"HTTP {resp.status_code}")}
            return resp.json()

    except httpx.ConnectError:
        return {"error": f"WhatsApp bridge is not reachable at {base_url}."}
    except httpx.TimeoutException:
        return {"error": "WhatsApp bridge timed out."}
    except httpx.HTTPError as e:
        return {"error": f"Failed to reach WhatsApp bridge: {e}"}


async def fetch_health(**kwargs) -> dict:
    return await _call_bridge("/health", **kwargs)


async def fetch_status(**kwargs) -> dict:
    return await _call_bridge("/status", **kwargs)


async def fetch_qr(**kwargs) -> dict:
    return await _call_bridge("/qr", **kwargs)


async def fetch_chats(**kwargs) -> Any:
    """Return the chat list, or ``{"error": ...}``."""
    return await _call_bridge("/chats", **kwargs)


def save_qr_png(data_url: str, path: Path) -> Path:
    """Write a PNG data URL from /qr to disk."""
    if not data_url.startswith(DATA_URL_PREFIX):
        raise ValueError("Not a PNG data URL.")
    path.write_bytes(base64.b64decode(data_url[len(DATA_URL_PREFIX):]))
    return path


async def _run(args: argparse.Namespace) -> int:
    fetchers = {
        "health": fetch_health,
        "status": fetch_status,
        "qr": fetch_qr,
        "chats": fetch_chats,
    }
    result = await fetchers[args.command](base_url=args.url)

    if isinstance(result, dict) and "error" in result:
        print(f"Error: {result['error']}", file=sys.stderr)
        return 1

    if args.command == "qr":
        qr = result.get("qr", "")
        if not qr:
            print("No QR code pending (already linked or still loading).")
            return 0
        if args.out:
            save_qr_png(qr, Path(args.out))
            print(f"QR code saved to {args.out}. Scan it from WhatsApp > Linked devices.")
            return 0

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="wa-bridge-status", description=__doc__)
    parser.add_argument("--url", default=WA_BRIDGE_URL, help="Bridge base URL")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("health", help="Show /health")
    sub.add_parser("status", help="Show /status")
    qr_parser = sub.add_parser("qr", help="Show or save the pending QR code")
    qr_parser.add_argument("--out", help="Write the QR code to this PNG file")
    sub.add_parser("chats", help="List chats")

    args = parser.parse_args(argv)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
