"""
Command line entry point for the deleted-request retention cleanup.

Usage:
    python -m property_portal.cleanup            # purge expired requests
    python -m property_portal.cleanup --preview  # list what would be purged
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from property_portal.database import AsyncSessionLocal, close_db_connection
from property_portal.services.cleanup import RequestCleanupService

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def run_cleanup(preview: bool = False, retention_days: Optional[int] = None) -> int:
    """
    Preview or purge expired soft-deleted requests.

    Returns:
        Number of requests listed (preview) or deleted (purge)
    """
    try:
        async with AsyncSessionLocal() as session:
            service = RequestCleanupService(session, retention_days=retention_days)
            if preview:
                summaries = await service.preview()
                for summary in summaries:
                    print(
                        f"{summary['id']}  {summary['address']}  "
                        f"deleted {summary['days_deleted']} days ago by {summary['deleted_by']}"
                    )
                print(f"{len(summaries)} requests eligible for permanent deletion")
            else:
                summaries = await service.purge()
                print(f"Permanently deleted {len(summaries)} expired requests")
            return len(summaries)
    finally:
        await close_db_connection()


def main():
    """Main CLI interface for the retention cleanup."""
    parser = argparse.ArgumentParser(description="Purge manager requests past the deletion retention window")
    parser.add_argument("--preview", action="store_true", help="List eligible requests without deleting")
    parser.add_argument("--retention-days", type=int, default=None, help="Override the configured retention window")
    args = parser.parse_args()

    try:
        asyncio.run(run_cleanup(preview=args.preview, retention_days=args.retention_days))
    except Exception as e:
        logger.error(f"Cleanup failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
