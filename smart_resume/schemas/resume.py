from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class JobMatchOut(CamelModel):
    title: str
    description: str
    skills: list[str] = Field(default_factory=list)
    matched_skills: list[str] = Field(default_factory=list)
    match_count: int = 0


class AnalyzeResponse(CamelModel):
    text_length: int
    snippet: str
    job_match: JobMatchOut | None = None
    message: str


class MatchedJobOut(CamelModel):
    title: str
    description: str = ""
    matched_skills: list[str] = Field(default_factory=list)


class ResumeRecordOut(CamelModel):
    id: str
    file_name: str
    original_name: str
    matched_job: MatchedJobOut | None = None
    snippet: str = ""
    user_id: str
    created_at: datetime
    updated_at: datetime
