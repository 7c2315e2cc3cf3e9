from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from smart_resume.core.config import settings

DEFAULT_CATALOG_PATH = Path(__file__).with_name("jobs.json")


class JobProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    skills: tuple[str, ...]
    description: str = ""

    @field_validator("skills")
    @classmethod
    def _normalize_skills(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        # Keywords are compared against case-folded text.
        return tuple(skill.strip().casefold() for skill in value if skill and skill.strip())


JobCatalog = tuple[JobProfile, ...]


def load_catalog(path: str | Path) -> JobCatalog:
    with Path(path).open("r", encoding="utf-8") as handle:
        raw = json.load(handle)
    if not isinstance(raw, list):
        raise ValueError(f"Job catalog at '{path}' must be a JSON list.")
    return tuple(JobProfile.model_validate(item) for item in raw)


@lru_cache(maxsize=1)
def get_job_catalog() -> JobCatalog:
    return load_catalog(settings.job_catalog_path or DEFAULT_CATALOG_PATH)
