"""Schemas for the HTTP proxy and AI execution endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class HttpProxyRequest(BaseModel):
    """Request schema for the HTTP proxy."""

    url: str = Field(..., description="Target URL; https:// is assumed when no scheme is given")
    method: str = Field("GET", description="HTTP method")
    headers: str | dict[str, Any] = Field("{}", description="Headers as JSON text or object")
    body: str | None = Field(None, description="Request body (ignored for GET)")


class HttpProxyResponse(BaseModel):
    """Normalized response of a proxied request."""

    status: int
    status_text: str = Field(..., alias="statusText")
    headers: dict[str, str]
    data: Any = None

    class Config:
        populate_by_name = True


class AIExecuteRequest(BaseModel):
    """Request schema for direct AI execution."""

    type: str = Field(..., description="AI node type, e.g. aiTextGenerator")
    config: dict[str, Any] = Field(default_factory=dict, description="Node configuration")
    input: Any = Field(None, description="Node input")
    previous_nodes: dict[str, Any] = Field(
        default_factory=dict, alias="previousNodes", description="Outputs of earlier nodes"
    )

    class Config:
        populate_by_name = True
