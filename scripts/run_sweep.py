"""Run one expiry sweep: prune expired bundles and delete their stored files.

Usage:
    python -m scripts.run_sweep
Uses the configured records path and storage backends (same env/.env as the
server). Safe to run while the server is up; deletes are best-effort.
"""

import asyncio
import sys

from cloudshare.core.config import get_settings
from cloudshare.core.container import ServiceContainer
from cloudshare.domain.enums import StoreMode
from cloudshare.shared.telemetry.logging import setup_logging


async def main() -> None:
    """Prune once and print counts."""
    settings = get_settings()
    setup_logging(settings.debug)
    services = await ServiceContainer.build(settings)
    try:
        if services.store.mode is not StoreMode.DURABLE:
            print(
                f"Records at {settings.records_path} are not usable; nothing to sweep",
                file=sys.stderr,
            )
            sys.exit(1)
        result = await services.sweeper.sweep_once()
    finally:
        await services.aclose()

    print(f"Pruned {result.bundles_pruned} bundle(s)")
    print(f"Deleted {result.files_deleted} file(s)")
    if result.delete_failures:
        print(f"Failed to delete {result.delete_failures} file(s)", file=sys.stderr)
    print("Done.")


if __name__ == "__main__":
    asyncio.run(main())
