"""
Sets the origins allowed to call /log, /page-stats and /total.
Run: python scripts/set_allowed_domains.py https://blog.example.com https://www.blog.example.com
Use "*" to allow any origin.
"""
import sys

from visitor_stats.database import SessionLocal, bootstrap_database
from visitor_stats.services.stats_store import get_allowed_origins, set_allowed_origins


def main(origins):
    bootstrap_database()
    db = SessionLocal()
    try:
        set_allowed_origins(db, origins)
        db.commit()
        print("✅ allowed_domains updated:")
        for origin in get_allowed_origins(db):
            print(f"   - {origin}")
    except Exception as e:
        db.rollback()
        print(f"❌ Could not update allowed_domains: {e}")
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)
    sys.exit(main(sys.argv[1:]))
