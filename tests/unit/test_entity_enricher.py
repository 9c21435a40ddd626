"""Unit tests for EntityEnricher."""

import pytest
from hypothesis import given, strategies as st

from src.components.common.models import NamedEntity
from src.components.qanswer.enricher import EntityEnricher

QUESTION = "Where was Albert Einstein born?"
EINSTEIN = "http://www.wikidata.org/entity/Q937"


@pytest.fixture
def enricher():
    return EntityEnricher()


class TestFilterEntities:
    """Test threshold filtering."""

    def test_below_threshold_dropped(self, enricher):
        entities = [
            NamedEntity(resource="urn:a", start=0, end=1, score=0.49),
            NamedEntity(resource="urn:b", start=2, end=3, score=0.5),
            NamedEntity(resource="urn:c", start=4, end=5),
        ]

        kept = enricher.filter_entities(entities, 0.5)

        assert [entity.resource for entity in kept] == ["urn:b", "urn:c"]


class TestEnrich:
    """Test question enrichment."""

    def test_entity_replaced(self, enricher):
        entities = [NamedEntity(resource=EINSTEIN, start=10, end=25, score=0.9)]

        assert enricher.enrich(QUESTION, entities, 0.5) == f"Where was {EINSTEIN} born?"

    def test_two_entities_with_threshold(self, enricher):
        question = "Is Berlin bigger than Paris?"
        entities = [
            NamedEntity(resource="urn:berlin", start=3, end=9, score=0.8),
            NamedEntity(resource="urn:paris", start=22, end=27, score=0.3),
        ]

        assert enricher.enrich(question, entities, 0.5) == "Is urn:berlin bigger than Paris?"

    def test_space_inserted_before_adjacent_character(self, enricher):
        entities = [NamedEntity(resource="urn:x", start=0, end=6, score=1.0)]

        assert enricher.enrich("Berlin's mayor", entities, 0.5) == "urn:x 's mayor"

    def test_no_space_at_end_of_question(self, enricher):
        entities = [NamedEntity(resource="urn:x", start=6, end=12, score=1.0)]

        assert enricher.enrich("Visit Berlin", entities, 0.5) == "Visit urn:x"

    def test_order_of_entities_irrelevant(self, enricher):
        question = "Is Berlin bigger than Paris?"
        first = NamedEntity(resource="urn:berlin", start=3, end=9, score=0.8)
        second = NamedEntity(resource="urn:paris", start=22, end=27, score=0.8)

        expected = "Is urn:berlin bigger than urn:paris ?"
        assert enricher.enrich(question, [first, second], 0.5) == expected
        assert enricher.enrich(question, [second, first], 0.5) == expected

    def test_entity_beyond_question_skipped(self, enricher):
        entities = [
            NamedEntity(resource="urn:far", start=40, end=50, score=1.0),
            NamedEntity(resource=EINSTEIN, start=10, end=25, score=1.0),
        ]

        assert enricher.enrich(QUESTION, entities, 0.5) == f"Where was {EINSTEIN} born?"

    def test_no_entities(self, enricher):
        assert enricher.enrich(QUESTION, [], 0.5) == QUESTION

    def test_input_list_not_mutated(self, enricher):
        entities = [
            NamedEntity(resource="urn:a", start=0, end=5, score=0.1),
            NamedEntity(resource="urn:b", start=10, end=25, score=0.9),
        ]
        original = list(entities)

        enricher.enrich(QUESTION, entities, 0.5)

        assert entities == original

    @given(
        question=st.text(alphabet="abc ", max_size=40),
        threshold=st.floats(min_value=0.0, max_value=1.0)
    )
    def test_entities_below_threshold_leave_question_unchanged_property(self, question, threshold):
        """For any question, entities scoring below the threshold change nothing."""
        entities = [
            NamedEntity(resource="urn:x", start=0, end=len(question), score=threshold / 2)
        ] if threshold > 0 else []

        assert EntityEnricher().enrich(question, entities, threshold) == question

    @given(
        words=st.lists(st.text(alphabet="abcdef", min_size=1, max_size=8), min_size=1, max_size=6),
        index=st.integers(min_value=0, max_value=5)
    )
    def test_single_word_replacement_property(self, words, index):
        """Replacing one whole word keeps every other word in place."""
        index = index % len(words)
        question = " ".join(words)
        start = sum(len(word) + 1 for word in words[:index])
        end = start + len(words[index])
        entity = NamedEntity(resource="urn:entity", start=start, end=end, score=1.0)

        enriched = EntityEnricher().enrich(question, [entity], 0.5)

        expected = words[:index] + ["urn:entity"] + words[index + 1:]
        assert enriched.split(" ") == expected
