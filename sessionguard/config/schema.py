"""Configuration schema using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Base(BaseModel):
    """Base model that accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GuardConfig(Base):
    """Tool result guard configuration."""

    soft_max_chars: int = Field(default=4_000, gt=0)  # per-result text budget before spilling
    keep_chars: int = Field(default=1_000, ge=0)  # head and tail retained inline
    head_snap_ratio: float = Field(default=0.8, ge=0.0, le=1.0)
    tail_snap_ratio: float = Field(default=0.2, ge=0.0, le=1.0)
    read_chunk_chars: int = Field(default=2_000, gt=0)  # suggested range size in the notice
    allow_synthetic_tool_results: bool = True


class Config(Base):
    """Root configuration for sessionguard."""

    guard: GuardConfig = Field(default_factory=GuardConfig)
