"""
Keyword job matching.

Scores résumé text against the job catalog by raw substring overlap. A
keyword counts when it appears anywhere in the case-folded text, including
inside an unrelated word ("ui" matches "build"); the engine does not look at
token boundaries.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from smart_resume.catalog.jobs import JobCatalog, JobProfile, get_job_catalog


class JobMatch(BaseModel):
    title: str
    description: str
    skills: list[str] = Field(default_factory=list)
    matched_skills: list[str] = Field(default_factory=list)
    match_count: int = 0


def normalize_text(text: str) -> str:
    return (text or "").casefold()


def matched_skills(profile: JobProfile, normalized_text: str) -> list[str]:
    return [skill for skill in profile.skills if skill in normalized_text]


def score_catalog(text: str, catalog: JobCatalog | None = None) -> list[JobMatch]:
    """Score every profile, best first; equal scores keep catalog order."""
    profiles = get_job_catalog() if catalog is None else catalog
    normalized = normalize_text(text)
    scored = []
    for profile in profiles:
        hits = matched_skills(profile, normalized)
        scored.append(
            JobMatch(
                title=profile.title,
                description=profile.description,
                skills=list(profile.skills),
                matched_skills=hits,
                match_count=len(hits),
            )
        )
    # sorted() is stable, so ties stay in catalog order.
    return sorted(scored, key=lambda item: item.match_count, reverse=True)


def match_job(text: str, catalog: JobCatalog | None = None) -> JobMatch | None:
    if not (text or "").strip():
        return None
    ranked = score_catalog(text, catalog)
    if not ranked or ranked[0].match_count == 0:
        return None
    return ranked[0]
