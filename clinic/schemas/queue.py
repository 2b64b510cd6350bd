"""Waiting queue schemas."""

import datetime as dt

from pydantic import BaseModel


class QueueFilters(BaseModel):
    """Optional, composable queue filters.

    ``status`` and ``type`` accept ``all`` as an explicit "no filter".
    """

    professional_id: int | None = None
    date: dt.date | None = None
    status: str | None = None
    type: str | None = None
