"""RuBQ query builder component."""

from .component import RuBQComponent
from .config import RuBQSettings, load_rubq_settings
from .models import RuBQResult
from .query_builder import RuBQQueryBuilder

__all__ = [
    "RuBQComponent",
    "RuBQSettings",
    "load_rubq_settings",
    "RuBQResult",
    "RuBQQueryBuilder",
]
