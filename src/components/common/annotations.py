"""
SPARQL templates for reading and writing pipeline annotations.

Queries are built from string.Template instances with named placeholders;
every value inserted into a template goes through sparql_literal() or
sparql_iri() first.
"""

from dataclasses import dataclass
from string import Template
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote

from .models import AnswerResult, QanaryQuestion

PREFIXES = """PREFIX qa: <http://www.wdaqua.eu/qa#>
PREFIX oa: <http://www.w3.org/ns/openannotation/core/>
PREFIX xsd: <http://www.w3.org/2001/XMLSchema#>
PREFIX rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#>
"""

QUESTION_SELECT = Template(PREFIXES + """SELECT ?question
FROM <$in_graph>
WHERE {
  ?question rdf:type qa:Question .
}
""")

NAMED_ENTITIES_SELECT = Template(PREFIXES + """SELECT ?entityResource ?annotationScore ?start ?end
FROM <$in_graph>
WHERE {
  ?annotation    oa:hasBody      ?entityResource .
  ?annotation    oa:hasTarget    ?target .
  ?target        oa:hasSource    <$question> .
  ?target        oa:hasSelector  ?textSelector .
  ?textSelector  rdf:type        oa:TextPositionSelector .
  ?textSelector  oa:start        ?start .
  ?textSelector  oa:end          ?end .
  OPTIONAL { ?annotation qa:score ?annotationScore . }
}
""")

INSERT = Template(PREFIXES + """INSERT {
GRAPH <$out_graph> {
$insert_body}
}
WHERE {
$where_body  BIND (now() AS ?time) .
  BIND (<$question> AS ?question) .
  BIND ("$score"^^xsd:double AS ?score) .
  BIND (<$service> AS ?service) .
}
""")


@dataclass(frozen=True)
class AnnotationSection:
    """One annotation kind: triples to insert and the bindings they need."""

    name: str
    insert: Template
    where: Template


ANNOTATION_HEADER = """    oa:hasTarget    ?question ;
    oa:annotatedBy  ?service ;
    oa:annotatedAt  ?time ;
    qa:score        ?score"""

SPARQL_QUERY = AnnotationSection(
    name="sparql",
    insert=Template("""  ?annotationSPARQL a qa:AnnotationOfAnswerSPARQL ;
    oa:hasBody      ?sparql ;
""" + ANNOTATION_HEADER + """$knowledge_graph_triple .
  ?sparql a qa:SparqlQuery ;
    rdf:value       ?sparqlQueryString .
"""),
    where=Template("""  BIND (IRI(str(RAND())) AS ?annotationSPARQL) .
  BIND (IRI(str(RAND())) AS ?sparql) .
  BIND ("$sparql"^^xsd:string AS ?sparqlQueryString) .
$knowledge_graph_bind"""),
)

IMPROVED_QUESTION = AnnotationSection(
    name="improved_question",
    insert=Template("""  ?annotationImprovedQuestion a qa:AnnotationOfImprovedQuestion ;
    oa:hasBody      ?improvedQuestion ;
""" + ANNOTATION_HEADER + """ .
  ?improvedQuestion a qa:ImprovedQuestion ;
    rdf:value       ?improvedQuestionText .
"""),
    where=Template("""  BIND (IRI(str(RAND())) AS ?annotationImprovedQuestion) .
  BIND (IRI(str(RAND())) AS ?improvedQuestion) .
  BIND ("$improved_question"^^xsd:string AS ?improvedQuestionText) .
"""),
)

ANSWER = AnnotationSection(
    name="answer",
    insert=Template("""  ?annotationAnswer a qa:AnnotationAnswer ;
    oa:hasBody      ?answer ;
""" + ANNOTATION_HEADER + """ .
  ?answer a qa:Answer ;
    rdf:value       [ a rdf:Seq $answer_values] .
"""),
    where=Template("""  BIND (IRI(str(RAND())) AS ?annotationAnswer) .
  BIND (IRI(str(RAND())) AS ?answer) .
"""),
)

ANSWER_TYPE = AnnotationSection(
    name="answer_type",
    insert=Template("""  ?annotationAnswerType a qa:AnnotationOfAnswerType ;
    oa:hasBody      ?answerType ;
""" + ANNOTATION_HEADER + """ .
  ?answerType a qa:AnswerType ;
    rdf:value       ?answerDataType .
"""),
    where=Template("""  BIND (IRI(str(RAND())) AS ?annotationAnswerType) .
  BIND (IRI(str(RAND())) AS ?answerType) .
  BIND (<$datatype> AS ?answerDataType) .
"""),
)

ANSWER_JSON = AnnotationSection(
    name="answer_json",
    insert=Template("""  ?annotationAnswerJson a qa:AnnotationOfAnswerJson ;
    oa:hasBody      ?answerJson ;
""" + ANNOTATION_HEADER + """ .
  ?answerJson rdf:value ?json .
"""),
    where=Template("""  BIND (IRI(str(RAND())) AS ?annotationAnswerJson) .
  BIND (IRI(str(RAND())) AS ?answerJson) .
  BIND ("$json"^^xsd:string AS ?json) .
"""),
)

ALL_SECTIONS = (SPARQL_QUERY, IMPROVED_QUESTION, ANSWER, ANSWER_TYPE, ANSWER_JSON)

_LITERAL_ESCAPES = {
    "\\": "\\\\",
    "\"": "\\\"",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

# characters allowed unescaped inside <...> besides letters and digits
_IRI_SAFE = ":/?#[]@!$&'()*+,;=%~-._"


def sparql_literal(value: str) -> str:
    """Escape a string for use inside a double-quoted SPARQL literal."""
    return "".join(_LITERAL_ESCAPES.get(char, char) for char in value)


def sparql_iri(value: str) -> str:
    """Percent-encode characters not allowed inside a SPARQL IRI reference."""
    return quote(value.strip(), safe=_IRI_SAFE)


def service_iri(application_name: str) -> str:
    return f"urn:qanary:{application_name}"


def build_question_query(in_graph: str) -> str:
    return QUESTION_SELECT.substitute(in_graph=sparql_iri(in_graph))


def build_named_entities_query(question: QanaryQuestion) -> str:
    return NAMED_ENTITIES_SELECT.substitute(
        in_graph=sparql_iri(question.in_graph),
        question=sparql_iri(question.uri)
    )


def format_answer_values(values: Iterable[str], is_resource_type: bool, datatype: Optional[str]) -> str:
    """Render answer values as rdf:_n members of an rdf:Seq (1-based)."""
    members = []
    for counter, value in enumerate(values, start=1):
        if is_resource_type:
            members.append(f"; rdf:_{counter} <{sparql_iri(value)}> ")
        else:
            members.append(
                f"; rdf:_{counter} \"{sparql_literal(value)}\"^^<{sparql_iri(datatype or '')}> "
            )
    return "".join(members)


def build_insert_query(
    question: QanaryQuestion,
    result: AnswerResult,
    application_name: str,
    sections: Iterable[AnnotationSection] = ALL_SECTIONS,
    knowledge_graph: Optional[str] = None
) -> str:
    """
    Create the SPARQL INSERT writing a QA result to the output graph.

    Sections that have nothing to say are left out: the SPARQL query section
    when no query was generated, the answer type section without a datatype.

    Args:
        question: Question the annotations target
        result: Parsed QA service result
        application_name: Name identifying the annotating service
        sections: Annotation kinds to write
        knowledge_graph: Endpoint of the knowledge graph the query runs on

    Returns:
        SPARQL UPDATE string
    """
    values: Dict[str, str] = {
        "sparql": sparql_literal(result.sparql or ""),
        "improved_question": sparql_literal(result.question),
        "answer_values": format_answer_values(result.values, result.is_resource_type, result.datatype),
        "datatype": sparql_iri(result.datatype or ""),
        "json": sparql_literal(result.raw_json),
        "knowledge_graph_triple": " ;\n    qa:overKnowledgeGraph ?knowledgeGraph" if knowledge_graph else "",
        "knowledge_graph_bind": (
            f"  BIND (<{sparql_iri(knowledge_graph)}> AS ?knowledgeGraph) .\n" if knowledge_graph else ""
        ),
    }

    selected: List[AnnotationSection] = []
    for section in sections:
        if section is SPARQL_QUERY and not result.sparql:
            continue
        if section is ANSWER_TYPE and not result.datatype:
            continue
        selected.append(section)

    return INSERT.substitute(
        out_graph=sparql_iri(question.out_graph),
        insert_body="".join(section.insert.substitute(values) for section in selected),
        where_body="".join(section.where.substitute(values) for section in selected),
        question=sparql_iri(question.uri),
        score=repr(float(result.confidence)),
        service=sparql_iri(service_iri(application_name)),
    )
