"""Command line entrypoint: run the onboarding peripheral or its paired client."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from onboarding.errors import UnknownActionError
from onboarding.gatt_client import run_client
from onboarding.gatt_server import run_server
from onboarding.protocol import CLIENT_PEER_ADDRESS, DEFAULT_INTERFACE

log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def dispatch(action: str, interface: str = DEFAULT_INTERFACE):
    """Return the coroutine for `action`."""
    if action == "server":
        return run_server(interface)
    if action == "client":
        return run_client(interface, CLIENT_PEER_ADDRESS)
    raise UnknownActionError(action)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="snapd onboarding BLE demo.")
    parser.add_argument("action", nargs="?", help="server (default) or client")
    parser.add_argument("--log-level", default="DEBUG")
    args, extra = parser.parse_known_args(argv)
    # unrecognized tokens in the action slot (e.g. "-x") are reported as unknown actions
    action = args.action if args.action is not None else (extra[0] if extra else "server")

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.DEBUG),
        format=LOG_FORMAT,
    )

    # bluez-peripheral needs root or bluetooth group + dbus policy
    try:
        asyncio.run(dispatch(action))
    except KeyboardInterrupt:
        log.info("Stopped by user")
    except Exception as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
