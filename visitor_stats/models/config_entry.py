from sqlalchemy import Column, String, Text

from ..database import Base

ALLOWED_DOMAINS_KEY = "allowed_domains"


class ConfigEntry(Base):
    """
    Key/value settings managed by the operator. The service only reads
    the `allowed_domains` row (a JSON array of origins).
    """
    __tablename__ = "config"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=True)
