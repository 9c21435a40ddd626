"""Dependency injection for FastAPI."""

from typing import Dict, Optional

from fastapi import HTTPException

from src.components.common.component import QanaryComponent
from src.components.qanswer.component import QAnswerComponent
from src.components.rubq.component import RuBQComponent

QANSWER = "qanswer"
RUBQ = "rubq"

# Component instances (initialized on startup)
_components: Dict[str, QanaryComponent] = {}


def set_component(name: str, component: Optional[QanaryComponent]) -> None:
    """Register (or with None, remove) a component instance.

    Called during application startup.
    """
    if component is None:
        _components.pop(name, None)
    else:
        _components[name] = component


def get_components() -> Dict[str, QanaryComponent]:
    """Get all registered components keyed by name."""
    return dict(_components)


def get_component(name: str) -> QanaryComponent:
    """Get a registered component.

    Raises:
        HTTPException: 503 if the component is not available
    """
    component = _components.get(name)
    if component is None:
        raise HTTPException(
            status_code=503,
            detail={"error_code": "COMPONENT_UNAVAILABLE", "message": f"Component '{name}' is not available"}
        )
    return component


def get_qanswer_component() -> QAnswerComponent:
    return get_component(QANSWER)


def get_rubq_component() -> RuBQComponent:
    return get_component(RUBQ)
