from sqlalchemy import Column, BigInteger, String

from ..database import Base


class UniqueVisitor(Base):
    """
    Set of visitor fingerprints ever seen. A row is written once per
    fingerprint and never touched again.
    """
    __tablename__ = "unique_visitors"

    ip_hash = Column(String(16), primary_key=True)
    first_seen = Column(BigInteger, nullable=False)
