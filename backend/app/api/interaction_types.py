"""Static list of interaction types offered by the interaction form."""

from fastapi import APIRouter

from backend.app.schemas.interaction import InteractionType

router = APIRouter(prefix="/interaction-types", tags=["interactions"])

INTERACTION_TYPES = [
    {"value": "coaching", "label": "Coaching"},
    {"value": "academic", "label": "Academic Support"},
    {"value": "career", "label": "Career Counseling"},
    {"value": "performance", "label": "Performance Improvement"},
    {"value": "behavioral", "label": "Behavioral Intervention"},
]


@router.get("", response_model=list[InteractionType])
def list_interaction_types():
    return INTERACTION_TYPES
