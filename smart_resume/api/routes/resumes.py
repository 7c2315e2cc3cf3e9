from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import Response

from smart_resume.core.rate_limit import rate_limit
from smart_resume.identity.gate import require_owner
from smart_resume.schemas.auth import MessageResponse
from smart_resume.schemas.resume import AnalyzeResponse, JobMatchOut, ResumeRecordOut
from smart_resume.services import resume_service

router = APIRouter()


@router.post("/api/resume/analyze", response_model=AnalyzeResponse)
@rate_limit()
async def analyze_resume(
    request: Request,
    resume: UploadFile | None = File(default=None),
    owner_id: str = Depends(require_owner),
):
    declared_size = resume.size if resume is not None else None
    result = await resume_service.analyze_resume(owner_id, resume, declared_size)
    return AnalyzeResponse(
        text_length=result.text_length,
        snippet=result.snippet,
        job_match=JobMatchOut(**result.job_match.model_dump()) if result.job_match else None,
        message=result.message,
    )


@router.get("/api/resumes/history", response_model=list[ResumeRecordOut])
async def resume_history(owner_id: str = Depends(require_owner)):
    records = await resume_service.list_history(owner_id)
    return [ResumeRecordOut.model_validate(record.model_dump()) for record in records]


@router.get("/file/{filename}")
async def serve_file(filename: str, owner_id: str = Depends(require_owner)):
    content = await resume_service.fetch_resume_file(owner_id, filename)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"inline; filename*=UTF-8''{quote(filename)}"},
    )


@router.delete("/delete/{filename}", response_model=MessageResponse)
async def delete_file(filename: str, owner_id: str = Depends(require_owner)):
    await resume_service.delete_resume(owner_id, filename)
    return MessageResponse(message="Deleted")
