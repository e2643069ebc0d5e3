"""
Beat pattern model - ready-made Sonic Pi scripts.

Beat patterns are copyable starting points: a named script plus enough
metadata to list and describe it.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class BeatPattern(BaseModel):
    """A named, ready-to-run Sonic Pi script."""

    schema_version: str = Field("beat-pattern/v1", alias="schema", description="Schema version")
    name: str = Field(..., description="Pattern name (e.g., 'blues')")
    description: str = Field("", description="Human-readable description")
    tempo: float = Field(..., gt=0, description="Tempo declared by the script (BPM)")
    tags: list[str] = Field(default_factory=list, description="Genre/feel tags")
    code: str = Field(..., description="Sonic Pi source")

    model_config = {"populate_by_name": True}

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Ensure pattern name is a valid identifier."""
        if not v or not v.replace("_", "").replace("-", "").isalnum():
            raise ValueError(f"Invalid pattern name: {v}")
        return v.lower().replace("-", "_")


class BeatPatternMetadata(BaseModel):
    """Lightweight pattern metadata for listing/discovery."""

    name: str = Field(..., description="Pattern name")
    description: str = Field("", description="Human-readable description")
    tempo: float = Field(..., description="Tempo (BPM)")
    tags: list[str] = Field(default_factory=list, description="Genre/feel tags")
    path: str | None = Field(None, description="Path to pattern file")

    @classmethod
    def from_pattern(cls, pattern: BeatPattern, path: str | None = None) -> BeatPatternMetadata:
        """Create metadata from a full pattern."""
        return cls(
            name=pattern.name,
            description=pattern.description,
            tempo=pattern.tempo,
            tags=list(pattern.tags),
            path=path,
        )
