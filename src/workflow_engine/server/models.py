"""Pydantic models for the REST server.

Domain models (definitions, instances, actions) are served as-is; these are
only the envelopes around them.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ServiceInfo(BaseModel):
    message: str
    version: str
    docs: str


class HealthStatus(BaseModel):
    status: str = "ok"
    definitions: int
    instances: int


class DefinitionCreated(BaseModel):
    message: str = "Workflow created successfully"
    id: str


class ApiError(BaseModel):
    reason: str
    message: str
    details: dict[str, object] = Field(default_factory=dict)
