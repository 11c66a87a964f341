#!/usr/bin/env python3
"""
Deletes raw visits older than the retention horizon (RETENTION_DAYS, default 90).
Meant to be run from cron, e.g. once a day:

    0 3 * * * cd /srv/visitor-stats && python cleanup_visits.py
"""

import sys
import logging

from visitor_stats.services.retention_service import run_retention_sweep

logging.basicConfig(level=logging.INFO)


if __name__ == "__main__":
    try:
        deleted = run_retention_sweep()
    except Exception:
        # run_retention_sweep already logged the failure
        sys.exit(1)
    print(f"[OK] {deleted} old visits removed")
    sys.exit(0)
