"""Component endpoints invoked by the Qanary pipeline."""

import logging

from fastapi import APIRouter, Depends

from src.components.common.models import QanaryMessage
from src.components.qanswer.component import QAnswerComponent
from src.components.rubq.component import RuBQComponent

from ..dependencies import get_qanswer_component, get_rubq_component

router = APIRouter(tags=["annotate"])
logger = logging.getLogger(__name__)


@router.post("/qanswer/annotatequestion", response_model=QanaryMessage)
def annotate_qanswer(
    message: QanaryMessage,
    component: QAnswerComponent = Depends(get_qanswer_component)
) -> QanaryMessage:
    """Enrich the question of a pipeline run and store the QAnswer answer."""
    logger.info(f"annotatequestion (qanswer): graph={message.in_graph}")
    return component.process(message)


@router.post("/rubq/annotatequestion", response_model=QanaryMessage)
def annotate_rubq(
    message: QanaryMessage,
    component: RuBQComponent = Depends(get_rubq_component)
) -> QanaryMessage:
    """Store the SPARQL query RuBQ builds for the question of a pipeline run."""
    logger.info(f"annotatequestion (rubq): graph={message.in_graph}")
    return component.process(message)
