"""
Ingredient repository for an organization's priced ingredient catalog.
"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from db.models import Ingredient
from services.ingredient_matcher import infer_category, infer_unit


class IngredientRepository:
    """Repository for Ingredient CRUD operations."""

    def __init__(self, db: Session):
        """Initialize with database session."""
        self.db = db

    def create(
        self,
        org_id: UUID,
        name: str,
        cost_per_unit: float = 0.0,
        unit: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Ingredient:
        """
        Create a new ingredient.

        Args:
            org_id: Organization UUID
            name: Ingredient name
            cost_per_unit: Price per unit
            unit: Pricing unit (inferred from the name if omitted)
            category: Category (inferred from the name if omitted)

        Returns:
            Created Ingredient object
        """
        ingredient = Ingredient(
            org_id=org_id,
            name=name.strip(),
            cost_per_unit=cost_per_unit,
            unit=unit or infer_unit(name),
            category=category or infer_category(name),
        )
        self.db.add(ingredient)
        self.db.commit()
        self.db.refresh(ingredient)
        return ingredient

    def get_by_id(self, org_id: UUID, ingredient_id: UUID) -> Optional[Ingredient]:
        """Get an ingredient by ID within an organization."""
        return self.db.query(Ingredient).filter_by(id=ingredient_id, org_id=org_id).first()

    def get_many(self, org_id: UUID, ingredient_ids: List[UUID]) -> dict:
        """
        Fetch several ingredients at once.

        Returns:
            dict of ingredient id -> Ingredient for the ids that exist
        """
        if not ingredient_ids:
            return {}
        rows = (
            self.db.query(Ingredient)
            .filter(Ingredient.org_id == org_id, Ingredient.id.in_(ingredient_ids))
            .all()
        )
        return {row.id: row for row in rows}

    def list_for_org(self, org_id: UUID, category: Optional[str] = None) -> List[Ingredient]:
        """
        All ingredients for an organization, ordered by name.

        Args:
            org_id: Organization UUID
            category: Optional category filter
        """
        q = self.db.query(Ingredient).filter_by(org_id=org_id)
        if category:
            q = q.filter_by(category=category)
        return q.order_by(Ingredient.name).all()
