"""
Outcome types returned by the service layer.

Services never raise for business outcomes; routes map a ``Failure`` to a
403/404 or to a back-redirect carrying ``message`` as the error flash.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T = None

    ok = True


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str = ""

    ok = False


Result = Union[Success[Any], Failure]
