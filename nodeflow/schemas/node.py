"""Node-related Pydantic schemas."""

from typing import Any

from pydantic import BaseModel, Field


class ConfigFieldOptionSchema(BaseModel):
    """Schema for a select option."""

    label: str
    value: str


class ConfigFieldSchema(BaseModel):
    """Schema for a node config field."""

    name: str
    label: str
    type: str
    required: bool = False
    default_value: Any = Field(None, alias="defaultValue")
    placeholder: str | None = None
    options: list[ConfigFieldOptionSchema] | None = None

    class Config:
        populate_by_name = True


class NodeTypeInfo(BaseModel):
    """Node type information for the palette."""

    type: str
    category: str
    display_name: str = Field(..., alias="displayName")
    description: str
    icon: str | None = None
    branching: bool = False
    default_config: dict[str, Any] = Field(default_factory=dict, alias="defaultConfig")
    config_fields: list[ConfigFieldSchema] = Field(default_factory=list, alias="configFields")

    class Config:
        populate_by_name = True
