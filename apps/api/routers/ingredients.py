"""
Ingredient catalog endpoints: listing, creation with inferred defaults and
fuzzy matching of free-text names against the catalog.
"""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from db.models import Ingredient as ORMIngredient
from db.session import get_session
from error_handler import APIError
from repositories.ingredients import IngredientRepository
from services.ingredient_matcher import find_similar_ingredients, infer_category, infer_unit

router = APIRouter(prefix="/ingredients", tags=["ingredients"])


# ============================================================================
# Pydantic Models
# ============================================================================


class IngredientRequest(BaseModel):
    """Request body for creating an ingredient."""

    name: str = Field(..., min_length=1)
    cost_per_unit: float = Field(0.0, ge=0)
    unit: Optional[str] = Field(None, description="Pricing unit; inferred from the name if omitted")
    category: Optional[str] = Field(None, description="Category; inferred from the name if omitted")


class IngredientResponse(BaseModel):
    """Catalog ingredient."""

    id: str
    org_id: str
    name: str
    category: str
    unit: str
    cost_per_unit: float

    @staticmethod
    def from_orm(item: ORMIngredient) -> "IngredientResponse":
        """Convert ORM model to response model."""
        return IngredientResponse(
            id=str(item.id),
            org_id=str(item.org_id),
            name=item.name,
            category=item.category,
            unit=item.unit,
            cost_per_unit=item.cost_per_unit,
        )


class MatchRequest(BaseModel):
    """Free-text name to match against the catalog."""

    search: str = Field(..., min_length=1)
    threshold: Optional[float] = Field(None, ge=0, le=1)


class IngredientMatchResponse(BaseModel):
    """Ranked catalog candidate."""

    id: str
    name: str
    similarity: float
    match_type: str


class MatchListResponse(BaseModel):
    """Matches sorted by similarity."""

    search: str
    matches: List[IngredientMatchResponse]


class InferenceResponse(BaseModel):
    """Suggested defaults for a new ingredient."""

    name: str
    category: str
    unit: str


def _parse_org(org_id: str) -> UUID:
    try:
        return UUID(org_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid org_id format")


# ============================================================================
# Endpoints
# ============================================================================


@router.get("", response_model=List[IngredientResponse])
def list_ingredients(
    org_id: str = Query(..., description="Organization UUID"),
    category: Optional[str] = Query(None, description="Optional category filter"),
    db: Session = Depends(get_session),
) -> List[IngredientResponse]:
    """List an organization's ingredients, ordered by name."""
    org_uuid = _parse_org(org_id)
    try:
        items = IngredientRepository(db).list_for_org(org_uuid, category=category)
    except SQLAlchemyError as e:
        raise APIError.handle_database_error("list ingredients", e, org_id=org_id)
    return [IngredientResponse.from_orm(item) for item in items]


@router.post("", response_model=IngredientResponse)
def create_ingredient(
    item: IngredientRequest,
    org_id: str = Query(..., description="Organization UUID"),
    db: Session = Depends(get_session),
) -> IngredientResponse:
    """
    Create an ingredient. Missing unit/category are inferred from the name.
    """
    org_uuid = _parse_org(org_id)
    APIError.log_operation_start("create ingredient", org_id=org_id)
    try:
        created = IngredientRepository(db).create(
            org_id=org_uuid,
            name=item.name,
            cost_per_unit=item.cost_per_unit,
            unit=item.unit,
            category=item.category,
        )
    except SQLAlchemyError as e:
        db.rollback()
        raise APIError.handle_database_error("create ingredient", e, org_id=org_id)
    APIError.log_operation_success(
        "create ingredient", org_id=org_id, extra_context={"ingredient_id": str(created.id)}
    )
    return IngredientResponse.from_orm(created)


@router.post("/match", response_model=MatchListResponse)
def match_ingredients(
    request: MatchRequest,
    org_id: str = Query(..., description="Organization UUID"),
    db: Session = Depends(get_session),
) -> MatchListResponse:
    """
    Rank the organization's ingredients against a free-text name
    (e.g. an invoice line item).
    """
    org_uuid = _parse_org(org_id)
    try:
        candidates = IngredientRepository(db).list_for_org(org_uuid)
    except SQLAlchemyError as e:
        raise APIError.handle_database_error("match ingredients", e, org_id=org_id)

    threshold = request.threshold if request.threshold is not None else settings.MATCH_THRESHOLD
    matches = find_similar_ingredients(request.search, candidates, threshold=threshold)

    return MatchListResponse(
        search=request.search,
        matches=[
            IngredientMatchResponse(
                id=m.id, name=m.name, similarity=m.similarity, match_type=m.match_type
            )
            for m in matches
        ],
    )


@router.get("/infer", response_model=InferenceResponse)
def infer_defaults(name: str = Query(..., min_length=1, description="Ingredient name")) -> InferenceResponse:
    """Suggest a category and pricing unit for a new ingredient name."""
    return InferenceResponse(name=name, category=infer_category(name), unit=infer_unit(name))
