# src/campus_wellness/scripts/cleanup_activities.py
"""
Cron job removing activities whose date has passed.

Use this instead of the in-process worker when ``ACTIVITY_CLEANUP_ENABLED``
is off, e.g. when several API replicas share one database.
"""

from campus_wellness.db.session import SessionLocal
from campus_wellness.services.activities import cleanup_expired_activities


def main() -> None:
    """Run one sweep."""
    with SessionLocal() as db:
        removed = cleanup_expired_activities(db)
    print(f"Removed {len(removed)} past activities")


if __name__ == "__main__":
    main()
