from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ValidationError, validator

from packages.greetings.errors import RegistryConfigError


@dataclass(frozen=True)
class SubCondition:
    id: str
    weight: float
    predicate: str | None = None


@dataclass(frozen=True)
class Subcase:
    id: str
    weight: float
    predicate: str | None = None
    sub_conditions: Mapping[str, SubCondition] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def has_sub_conditions(self) -> bool:
        return bool(self.sub_conditions)


@dataclass(frozen=True)
class Category:
    id: str
    base_weight: float
    subcases: Mapping[str, Subcase] = field(default_factory=lambda: MappingProxyType({}))
    name: str | None = None
    description: str | None = None

    @property
    def enabled(self) -> bool:
        return self.base_weight > 0


class CategoryRegistry:
    """Read-only, ordered table of greeting categories.

    Iteration order is the declaration order and doubles as the sampler's
    tie-break order.
    """

    def __init__(self, categories: Iterable[Category], version: str | None = None) -> None:
        ordered: dict[str, Category] = {}
        for category in categories:
            if category.id in ordered:
                raise RegistryConfigError(f"Duplicate category id {category.id}")
            ordered[category.id] = category
        self._categories = MappingProxyType(ordered)
        self.version = version

    def __iter__(self):
        return iter(self._categories.values())

    def __len__(self) -> int:
        return len(self._categories)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._categories

    def get(self, category_id: str) -> Category | None:
        return self._categories.get(category_id)

    @property
    def is_empty(self) -> bool:
        return not self._categories

    def first(self) -> Category | None:
        return next(iter(self._categories.values()), None)

    def available(self) -> list[Category]:
        return [category for category in self if category.enabled]

    def predicate_names(self) -> set[str]:
        names: set[str] = set()
        for category in self:
            for subcase in category.subcases.values():
                if subcase.predicate:
                    names.add(subcase.predicate)
                for sub_condition in subcase.sub_conditions.values():
                    if sub_condition.predicate:
                        names.add(sub_condition.predicate)
        return names


def category(
    category_id: str,
    base_weight: float,
    subcases: Iterable[Subcase],
    name: str | None = None,
    description: str | None = None,
) -> Category:
    return Category(
        id=category_id,
        base_weight=base_weight,
        subcases=_index(subcases, f"category {category_id}"),
        name=name,
        description=description,
    )


def subcase(
    subcase_id: str,
    weight: float,
    predicate: str | None = None,
    sub_conditions: Iterable[SubCondition] = (),
) -> Subcase:
    return Subcase(
        id=subcase_id,
        weight=weight,
        predicate=predicate,
        sub_conditions=_index(sub_conditions, f"subcase {subcase_id}"),
    )


def _index(rows: Iterable[Any], owner: str) -> Mapping[str, Any]:
    indexed: dict[str, Any] = {}
    for row in rows:
        if row.id in indexed:
            raise RegistryConfigError(f"Duplicate id {row.id} in {owner}")
        indexed[row.id] = row
    return MappingProxyType(indexed)


class SubConditionRow(BaseModel):
    id: str
    weight: float
    predicate: str | None = None

    @validator("id")
    def validate_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Empty id")
        return value

    @validator("weight")
    def validate_weight(cls, value: float) -> float:
        if not math.isfinite(value) or value < 0:
            raise ValueError("Weight must be a finite number >= 0")
        return value


class SubcaseRow(SubConditionRow):
    sub_conditions: list[SubConditionRow] = []


class CategoryRow(BaseModel):
    id: str
    base_weight: float
    name: str | None = None
    description: str | None = None
    subcases: list[SubcaseRow] = []

    @validator("id")
    def validate_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Empty id")
        return value

    @validator("base_weight")
    def validate_base_weight(cls, value: float) -> float:
        if not math.isfinite(value) or value < 0:
            raise ValueError("Base weight must be a finite number >= 0")
        return value


class RegistryDocument(BaseModel):
    version: str | None = None
    categories: list[CategoryRow] = []


def registry_from_dict(data: Mapping[str, Any]) -> CategoryRegistry:
    try:
        document = RegistryDocument.parse_obj(data)
    except ValidationError as exc:
        raise RegistryConfigError(f"Invalid greeting registry: {exc}") from exc
    return CategoryRegistry(
        (
            category(
                row.id,
                row.base_weight,
                (
                    subcase(
                        sub.id,
                        sub.weight,
                        sub.predicate,
                        (SubCondition(id=cond.id, weight=cond.weight, predicate=cond.predicate)
                         for cond in sub.sub_conditions),
                    )
                    for sub in row.subcases
                ),
                name=row.name,
                description=row.description,
            )
            for row in document.categories
        ),
        version=document.version,
    )


def registry_to_dict(registry: CategoryRegistry) -> dict[str, Any]:
    return {
        "version": registry.version,
        "categories": [
            {
                "id": cat.id,
                "name": cat.name,
                "description": cat.description,
                "base_weight": cat.base_weight,
                "subcases": [
                    {
                        "id": sub.id,
                        "weight": sub.weight,
                        "predicate": sub.predicate,
                        "sub_conditions": [
                            {"id": cond.id, "weight": cond.weight, "predicate": cond.predicate}
                            for cond in sub.sub_conditions.values()
                        ],
                    }
                    for sub in cat.subcases.values()
                ],
            }
            for cat in registry
        ],
    }


def load_registry(path: str | Path) -> CategoryRegistry:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise RegistryConfigError(f"Cannot read greeting registry {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise RegistryConfigError("Greeting registry must be a JSON object")
    return registry_from_dict(data)
