"""Tagged results returned by the lookup resolvers."""
from typing import Generic, Optional, TypeVar, Union

from pydantic import BaseModel

T = TypeVar("T")


class Found(BaseModel, Generic[T]):
    """A lookup that produced a value."""
    value: T


class NotFound(BaseModel):
    """A lookup that produced nothing. `reason` is for logs only."""
    reason: Optional[str] = None


LookupResult = Union[Found, NotFound]
