from sqlalchemy import Column, Integer, BigInteger, Text

from ..database import Base


class PageStats(Base):
    __tablename__ = "page_stats"

    page_path = Column(Text, primary_key=True)
    total_visits = Column(Integer, nullable=False, default=0)
    last_updated = Column(BigInteger, nullable=False)
