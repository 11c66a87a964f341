from sqlalchemy import Column, Integer, BigInteger, String, Text, Index

from ..database import Base


class Visit(Base):
    """
    One raw hit. Append-only; rows are only removed in bulk by the
    retention sweep.
    """
    __tablename__ = "visits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    visit_time = Column(BigInteger, nullable=False)  # epoch millis
    # page_path and country come straight from the request and are unbounded
    page_path = Column(Text, nullable=False)
    ip_hash = Column(String(16), nullable=False)
    user_agent = Column(String(1000), nullable=False, default="")
    referer = Column(String(500), nullable=False, default="")
    country = Column(Text, nullable=False, default="")

    __table_args__ = (
        Index("idx_visits_time", "visit_time"),
    )
