"""Pydantic schemas for run lifecycle events."""

from typing import Literal

from pydantic import BaseModel


class RunEvent(BaseModel):
    event: Literal["started", "completed", "deleted", "finalized"]
    pipeline: str
    build: int
    kind: str = "workflow"


class RunEventResponse(BaseModel):
    event: str
    pipeline: str
    build: int
    watched: bool


class WatchedRun(BaseModel):
    pipeline: str
    build: int


class WatchListResponse(BaseModel):
    runs: list[WatchedRun]
    total: int
