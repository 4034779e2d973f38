"""Shared pydantic bases: ORM-backed read/write models and raw API payloads."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict


class SchemaBase(BaseModel):
    """Schemas that are built from, or written to, ORM rows."""

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
    )

    @classmethod
    def from_orm(cls, obj: Any) -> Self:
        """Validate a schema from a mapped instance (or any attribute bag)."""
        return cls.model_validate(obj)

    @classmethod
    def from_orm_list(cls, objs: list[Any]) -> list[Self]:
        return [cls.from_orm(obj) for obj in objs]


class LenientModel(BaseModel):
    """Base for raw API payloads: unknown keys are dropped, absent keys default."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)
