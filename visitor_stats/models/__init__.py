# Import every model so Base.metadata knows about all tables
from .visit import Visit
from .unique_visitor import UniqueVisitor
from .page_stats import PageStats
from .global_stats import GlobalStats, GLOBAL_STATS_ID
from .config_entry import ConfigEntry, ALLOWED_DOMAINS_KEY

__all__ = [
    "Visit",
    "UniqueVisitor",
    "PageStats",
    "GlobalStats",
    "GLOBAL_STATS_ID",
    "ConfigEntry",
    "ALLOWED_DOMAINS_KEY",
]
