from typing import Any

from pydantic import BaseModel, ConfigDict


class ModelBase(BaseModel):
    """
    Base class for all state-reset request and config models.

    Enforces strict validation, forbids unknown fields,
    and enables assignment-time validation.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        frozen=False,
    )


Address = tuple[str, ...]
State = dict[str, Any]
