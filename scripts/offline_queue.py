#!/usr/bin/env python3
"""Inspect, replay or clear a durable offline queue file.

Usage
-----
::

    python scripts/offline_queue.py show  --queue ~/.raksha/queue.json
    python scripts/offline_queue.py drain --queue ~/.raksha/queue.json
    python scripts/offline_queue.py clear --queue ~/.raksha/queue.json

``drain`` replays against ``RAKSHA_BASE_URL`` (see ``RakshaConfig.from_env``).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyraksha import RakshaClient, RakshaConfig  # noqa: E402
from pyraksha._redact import redact_for_log  # noqa: E402
from pyraksha.offline import JsonFileStore, MutationQueue, SnapshotStore  # noqa: E402


def _show(queue: MutationQueue, *, redact: bool) -> None:
    snapshot = queue.snapshot()
    data = snapshot.to_storage()
    print(json.dumps(redact_for_log(data) if redact else data, indent=2, ensure_ascii=False))
    print(f"# {snapshot.total} queued", file=sys.stderr)


async def _drain(config: RakshaConfig) -> int:
    async with RakshaClient(config) as client:
        before = client.queue.size()
        outcome = await client.sync_offline_data()
    print(
        f"{before} queued: {len(outcome.succeeded)} succeeded, "
        f"{len(outcome.failed)} failed, {len(outcome.expired)} expired"
    )
    for entry_id, error in outcome.errors.items():
        print(f"  {entry_id}: {error}")
    return 1 if outcome.failed else 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Inspect or replay the pyraksha offline queue")
    parser.add_argument("command", choices=("show", "drain", "clear"))
    parser.add_argument("--queue", required=True, help="Path of the queue file")
    parser.add_argument("--key", default=None, help="Storage key (default: config storage_key)")
    parser.add_argument("--no-redact", action="store_true", help="Print contacts and keys unmasked")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides = {"queue_path": args.queue}
    if args.key:
        overrides["storage_key"] = args.key
    config = RakshaConfig.from_env(**overrides)
    queue = MutationQueue(SnapshotStore(JsonFileStore(args.queue), config.storage_key))

    if args.command == "show":
        _show(queue, redact=not args.no_redact)
        return 0
    if args.command == "clear":
        removed = queue.size()
        queue.clear()
        print(f"cleared {removed} queued mutations")
        return 0
    return asyncio.run(_drain(config))


if __name__ == "__main__":
    sys.exit(main())
