"""
Expiry Sweep Task

Periodic eviction of expired files and orphaned blobs.
Thin wrapper that delegates to TransferService.
"""

import logging
from typing import Any, Dict

from utransfer.application.transfer_service import TransferService

from .periodic import PeriodicTask

logger = logging.getLogger(__name__)


class ExpirySweepScheduler(PeriodicTask):
    """
    Sweeps the registry on a fixed interval.

    Each tick:
    1. Removes expired records and deletes their blobs (the registry
       publishes one catalog broadcast per non-empty sweep)
    2. Deletes orphaned blobs older than the file TTL
    3. Logs a summary
    """

    name = "expiry-sweep"

    def __init__(self, transfer_service: TransferService, interval_seconds: float = 60):
        """
        Args:
            transfer_service: Service owning the registry and blob store
            interval_seconds: Time between sweeps
        """
        super().__init__(interval_seconds)
        self.transfer_service = transfer_service

    def run_once(self) -> Dict[str, Any]:
        """
        Run one sweep.

        Returns:
            dict: Cleanup statistics with counts and errors
        """
        cleanup_stats = {
            "expired_removed": 0,
            "orphans_removed": 0,
            "errors": [],
        }

        try:
            expired = self.transfer_service.expire_files()
            cleanup_stats["expired_removed"] = len(expired)
        except Exception as e:
            error_msg = f"Error sweeping expired files: {e}"
            cleanup_stats["errors"].append(error_msg)
            logger.error(f"[SWEEP] {error_msg}", exc_info=True)

        try:
            max_age = self.transfer_service.registry.ttl.total_seconds()
            cleanup_stats["orphans_removed"] = self.transfer_service.cleanup_orphaned_blobs(max_age)
        except Exception as e:
            error_msg = f"Error cleaning up orphaned blobs: {e}"
            cleanup_stats["errors"].append(error_msg)
            logger.error(f"[SWEEP] {error_msg}", exc_info=True)

        if cleanup_stats["expired_removed"] or cleanup_stats["orphans_removed"]:
            logger.info(
                f"[SWEEP] Expired: {cleanup_stats['expired_removed']}, "
                f"Orphaned: {cleanup_stats['orphans_removed']}, "
                f"Errors: {len(cleanup_stats['errors'])}"
            )
        else:
            logger.debug("[SWEEP] Nothing to clean up")

        return cleanup_stats
