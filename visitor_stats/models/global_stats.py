from sqlalchemy import Column, Integer, BigInteger

from ..database import Base

GLOBAL_STATS_ID = 1


class GlobalStats(Base):
    """Singleton row (id = 1) holding the lifetime site counters."""
    __tablename__ = "global_stats"

    id = Column(Integer, primary_key=True, default=GLOBAL_STATS_ID)
    total_visits = Column(Integer, nullable=False, default=0)
    total_unique_visitors = Column(Integer, nullable=False, default=0)
    last_updated = Column(BigInteger, nullable=True)
