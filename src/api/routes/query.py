"""Direct query endpoints bypassing the pipeline triplestore."""

import logging

from fastapi import APIRouter, Depends

from src.components.common.models import AnswerResult
from src.components.qanswer.component import QAnswerComponent
from src.components.qanswer.models import QAnswerRequest
from src.components.rubq.component import RuBQComponent

from ..dependencies import get_qanswer_component, get_rubq_component
from ..models.schemas import AnswerResponse, QuestionRequest

router = APIRouter(tags=["query"])
logger = logging.getLogger(__name__)


def to_response(result: AnswerResult) -> AnswerResponse:
    return AnswerResponse(
        question=result.question,
        sparql=result.sparql,
        values=result.values,
        datatype=result.datatype,
        confidence=result.confidence,
        is_resource_type=result.is_resource_type,
        language=result.language,
        knowledge_base=result.knowledge_base,
        raw_json=result.raw_json
    )


@router.post("/qanswer/query", response_model=AnswerResponse)
def query_qanswer(
    request: QAnswerRequest,
    component: QAnswerComponent = Depends(get_qanswer_component)
) -> AnswerResponse:
    """Ask QAnswer a question directly."""
    logger.info(f"QAnswer query: {request.question[:50]}")
    extra_params = {
        "knowledge_base": request.knowledge_base_id,
        "user": request.user,
    }
    result = component.query_builder.query(
        request.question,
        lang=request.language,
        extra_params={key: value for key, value in extra_params.items() if value},
        endpoint_url=request.qanswer_endpoint_url
    )
    return to_response(result)


@router.post("/rubq/query", response_model=AnswerResponse)
def query_rubq(
    request: QuestionRequest,
    component: RuBQComponent = Depends(get_rubq_component)
) -> AnswerResponse:
    """Ask RuBQ for the SPARQL query of a question."""
    logger.info(f"RuBQ query: {request.question[:50]}")
    result = component.query_builder.query(request.question, lang=request.language)
    return to_response(result)
