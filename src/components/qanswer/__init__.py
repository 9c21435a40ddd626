"""QAnswer query builder and executor component.

Enriches questions with previously recognized named entities, answers them
with the QAnswer web service and writes the answers back as annotations.
"""

from .component import QAnswerComponent
from .config import QAnswerSettings, load_qanswer_settings
from .enricher import EntityEnricher
from .models import QAnswerRequest, QAnswerResult
from .query_builder import QAnswerQueryBuilder

__all__ = [
    "QAnswerComponent",
    "QAnswerSettings",
    "load_qanswer_settings",
    "EntityEnricher",
    "QAnswerRequest",
    "QAnswerResult",
    "QAnswerQueryBuilder",
]
