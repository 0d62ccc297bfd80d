"""Result base shared by every extraction activity.

Activities never raise for expected failures such as an expired token or an
upstream error status. They return an ActivityResult subclass with
success=False and a message instead, and only transport failures escape as
exceptions so Temporal can retry them.
"""

from pydantic import BaseModel


class ActivityResult(BaseModel):
    """Outcome of one activity call.

    `data` carries small scalar details (e.g. the token endpoint's rejection)
    for results that have no dedicated fields of their own.
    """

    success: bool
    message: str
    data: dict[str, str | int | float | bool | None] | None = None
