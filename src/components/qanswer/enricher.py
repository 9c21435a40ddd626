"""
Entity enrichment of questions.

The QAnswer service understands resource URIs inside the question text, so
spans recognized as named entities are replaced by the URI of the entity
before the question is sent.
"""

from typing import List, Sequence

from ..common.logging import ComponentLoggerMixin
from ..common.models import NamedEntity


class EntityEnricher(ComponentLoggerMixin):
    """Replaces named entity spans of a question by their resource URIs."""

    def filter_entities(self, entities: Sequence[NamedEntity], threshold: float) -> List[NamedEntity]:
        """Keep entities scoring at least the threshold; unscored ones are always kept."""
        kept = []
        for entity in entities:
            ignored = entity.score is not None and entity.score < threshold
            self.logger.debug(
                f"entity at ({entity.start},{entity.end}) score={entity.score} "
                f"threshold={threshold} ignored={ignored}"
            )
            if not ignored:
                kept.append(entity)
        return kept

    def enrich(self, question: str, entities: Sequence[NamedEntity], threshold: float) -> str:
        """
        Create the enriched form of a question.

        Entities are applied rightmost first so that a replacement never
        shifts the offsets of spans still to be processed. A single space is
        inserted after a replacement when the following character exists and
        is not whitespace.

        Args:
            question: Original question text
            entities: Named entities with offsets into the original question
            threshold: Minimum score of an entity to be applied

        Returns:
            The question with entity spans replaced by resource URIs
        """
        enriched = question
        retained = sorted(
            self.filter_entities(entities, threshold),
            key=lambda entity: entity.start,
            reverse=True
        )

        for run, entity in enumerate(retained):
            if entity.end > len(question):
                self.logger.warning(
                    f"entity span ({entity.start},{entity.end}) exceeds question length "
                    f"{len(question)}, skipped"
                )
                continue

            first = enriched[:entity.start]
            second = enriched[entity.end:]
            if second and not second[0].isspace():
                second = " " + second
            enriched = first + entity.resource + second

            self.logger.debug(
                f"{run}. replace of '{question[entity.start:entity.end]}' at "
                f"({entity.start},{entity.end}) results in: {enriched}"
            )

        self.logger.info(f"Question original: {question}")
        self.logger.info(f"Question changed : {enriched}")
        return enriched
