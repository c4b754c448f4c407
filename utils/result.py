"""
Result types for operations that can fail without raising.

Auth operations return either Success(value) or Failure(error) so every
failure path is an ordinary value the HTTP layer can map to a response:

    outcome = protocol.refresh(token)
    if isinstance(outcome, Failure):
        return failure_response(outcome.error)
    pair = outcome.value
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class Failure(Generic[E]):
    error: E


Result = Union[Success[T], Failure[E]]
