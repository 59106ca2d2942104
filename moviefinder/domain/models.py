"""Pydantic models describing the search fetch lifecycle."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

# Raw TMDB result record, passed through to the view untouched.
MovieItem = dict[str, Any]


class _FrozenState(BaseModel):
    model_config = ConfigDict(frozen=True)


class IdleState(_FrozenState):
    status: Literal["idle"] = "idle"


class LoadingState(_FrozenState):
    status: Literal["loading"] = "loading"


class ErrorState(_FrozenState):
    status: Literal["error"] = "error"
    message: str


class LoadedState(_FrozenState):
    status: Literal["loaded"] = "loaded"
    # Items are not validated; whatever the catalog returned is kept as-is.
    results: list[Any] = Field(default_factory=list)


FetchState = Annotated[
    Union[IdleState, LoadingState, ErrorState, LoadedState],
    Field(discriminator="status"),
]


__all__ = [
    "ErrorState",
    "FetchState",
    "IdleState",
    "LoadedState",
    "LoadingState",
    "MovieItem",
]
