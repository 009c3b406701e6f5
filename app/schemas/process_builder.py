"""Process builder schemas."""

from typing import Any, Literal

from pydantic import BaseModel, Field

from app.process_builders.core.types import PipelineMetadata, ProcessBuilderOptions


class RuleLimitResponse(BaseModel):
    min: float | None = None
    max: float | None = None


class ProcessBuilderResponse(BaseModel):
    """Schema for one registered process builder."""

    id: str
    name: str
    description: str
    version: str
    tasks: list[str]
    required_rules: list[str]
    optional_rules: list[str]
    defaults: dict[str, Any]
    limits: dict[str, RuleLimitResponse]
    deprecated_versions: list[str] = Field(default_factory=list)

    @classmethod
    def from_metadata(cls, metadata: PipelineMetadata) -> "ProcessBuilderResponse":
        return cls(
            id=metadata.id,
            name=metadata.name,
            description=metadata.description,
            version=metadata.version,
            tasks=list(metadata.tasks),
            required_rules=list(metadata.required_rules),
            optional_rules=list(metadata.optional_rules),
            defaults=dict(metadata.defaults),
            limits={
                key: RuleLimitResponse(min=limit.min, max=limit.max)
                for key, limit in metadata.limits.items()
            },
            deprecated_versions=list(metadata.deprecated_versions),
        )


class ProcessBuilderRunOptions(BaseModel):
    allow_partial_results: bool = False
    use_cache: bool = False
    dry_run: bool = False

    def to_options(self) -> ProcessBuilderOptions:
        return ProcessBuilderOptions(
            allow_partial_results=self.allow_partial_results,
            use_cache=self.use_cache,
            dry_run=self.dry_run,
        )


class ProcessBuilderRunRequest(BaseModel):
    """Schema for starting a process builder run.

    Rules may be raw values or `{"value": ..., "type": ...}` objects.
    """

    goal: dict[str, Any]
    rules: dict[str, Any] = Field(default_factory=dict)
    options: ProcessBuilderRunOptions = Field(default_factory=ProcessBuilderRunOptions)


class ProcessBuilderRunResponse(BaseModel):
    """Serialized pipeline result."""

    status: Literal["success", "partial", "error"]
    process_id: str
    process_name: str
    run_id: str | None = None
    results: list[dict[str, Any]]
    task_progress: list[dict[str, Any]]
    final_result: Any = None
    errors: list[dict[str, Any]] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    execution_time_ms: int
    metadata: dict[str, Any] = Field(default_factory=dict)
