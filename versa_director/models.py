from __future__ import annotations

from pydantic import BaseModel, ValidationInfo, field_validator


class WireModel(BaseModel):
    """Base for Director response records.

    JSON ``null`` decodes to the field's default, so ``"refresh_token": null``
    reads as ``""`` and ``"roles": null`` as ``[]``. Required fields still
    reject ``null``.
    """

    model_config = {"extra": "ignore", "populate_by_name": True}

    @field_validator("*", mode="before")
    @classmethod
    def null_is_default(cls, v, info: ValidationInfo):
        if v is not None or info.field_name is None:
            return v
        field = cls.model_fields[info.field_name]
        if field.is_required():
            return v
        return field.get_default(call_default_factory=True)
