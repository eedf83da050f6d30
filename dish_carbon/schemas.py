from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


def round1(value: float) -> float:
    """Round half up to one decimal (0.05 -> 0.1, 0.15 -> 0.2)."""
    return float(Decimal(repr(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class Ingredient(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    carbon_kg: float = Field(alias="carbonKg", ge=0)


class EstimateResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    dish: str
    ingredients: List[Ingredient] = Field(default_factory=list)
    error: Optional[str] = None

    @computed_field(alias="estimatedCarbonKg")
    @property
    def estimated_carbon_kg(self) -> float:
        return round1(sum(i.carbon_kg for i in self.ingredients))

    @property
    def is_fallback(self) -> bool:
        return self.error is not None


class DishRequest(BaseModel):
    dish: str

    @field_validator("dish")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("dish must not be blank")
        return v
