"""Pydantic response models (DTOs) for FastAPI endpoints."""

from pydantic import BaseModel, Field


class SourceDTO(BaseModel):
    id: str
    title: str
    url: str
    snippet: str
    source_provider: str
    relevance_score: float
    published_date: str | None = None
    image_url: str | None = None
    domain: str


class SearchResponseDTO(BaseModel):
    request_id: str
    answer: str
    sources: list[SourceDTO]
    follow_up_questions: list[str]
    confidence: float
    processing_time: int
    query_intent: str
    quality_issues: list[str] = Field(default_factory=list)
    providers_succeeded: list[str] = Field(default_factory=list)
    answered_by: str

    @classmethod
    def from_answer(cls, answer):
        """Convert SearchAnswer to DTO."""
        return cls(**answer.to_dict())


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str
    providers: dict[str, str] = Field(default_factory=dict)


class OperationStatsDTO(BaseModel):
    average_time_ms: float
    success_rate: float
    total_operations: int
    slowest_ms: float
    fastest_ms: float


class MetricsResponseDTO(BaseModel):
    buffer_size: int
    buffer_capacity: int
    overall: OperationStatsDTO
    operations: dict[str, OperationStatsDTO]
