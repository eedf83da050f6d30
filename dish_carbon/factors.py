# dish_carbon/factors.py - static ingredient -> kg CO2e table
from types import MappingProxyType
from typing import Mapping, Optional

DEFAULT_FACTOR = 0.5

# kg CO2e per typical serving
CARBON_DB: Mapping[str, float] = MappingProxyType({
    "chicken": 2.5,
    "rice": 1.1,
    "beef": 6.0,
    "pork": 3.8,
    "lamb": 5.5,
    "tofu": 0.2,
    "cheese": 3.0,
    "milk": 0.6,
    "butter": 1.0,
    "oil": 0.4,
    "spices": 0.2,
    "onion": 0.05,
    "garlic": 0.03,
    "tomato": 0.1,
    "potato": 0.07,
    "egg": 0.5,
    "noodles": 0.9,
    "vegetables": 0.1,
    "beans": 0.3,
    "lentils": 0.2,
})


def _key(name: Optional[str]) -> str:
    return (name or "").strip().lower()


class EmissionFactorTable:
    def __init__(self, factors: Mapping[str, float] = CARBON_DB, default: float = DEFAULT_FACTOR):
        self._factors = MappingProxyType({_key(k): float(v) for k, v in factors.items()})
        self.default = default

    def lookup(self, name: Optional[str]) -> float:
        """Factor for an ingredient name; unknown names get the default."""
        return self._factors.get(_key(name), self.default)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _key(name) in self._factors

    def __len__(self) -> int:
        return len(self._factors)
