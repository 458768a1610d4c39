"""Glossary endpoints."""

from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Response

from stenopro.dependencies import get_glossary_repository
from stenopro.exceptions import DuplicateGlossaryEntryError, GlossaryEntryNotFoundError
from stenopro.repositories import GlossaryRepository
from stenopro.request_models import GlossaryEntryCreateRequest, GlossaryImportRequest
from stenopro.response_models import GlossaryEntryResponse, GlossaryImportResponse

router = APIRouter(prefix="/glossary", tags=["glossary"])

GlossaryRepositoryDep = Annotated[GlossaryRepository, Depends(get_glossary_repository)]


@router.get("", response_model=List[GlossaryEntryResponse])
def list_glossary_entries(
    repo: GlossaryRepositoryDep,
    transcription_id: int | None = None,
    global_only: bool = False,
):
    """Lists glossary entries, optionally for one transcription or global only."""
    return repo.list_entries(transcription_id=transcription_id, global_only=global_only)


@router.post("", response_model=GlossaryEntryResponse, status_code=201)
def create_glossary_entry(body: GlossaryEntryCreateRequest, repo: GlossaryRepositoryDep):
    try:
        return repo.create(
            name=body.name,
            info=body.info,
            transcription_id=body.transcription_id,
            is_global=body.is_global,
        )
    except DuplicateGlossaryEntryError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/import", response_model=GlossaryImportResponse, status_code=201)
def import_glossary_entries(body: GlossaryImportRequest, repo: GlossaryRepositoryDep):
    """Adds many terms to one scope at once."""
    imported = repo.import_terms(
        body.terms,
        transcription_id=body.transcription_id,
        is_global=body.is_global,
    )
    return GlossaryImportResponse(imported=imported)


@router.delete("/{entry_id}", status_code=204)
def delete_glossary_entry(entry_id: int, repo: GlossaryRepositoryDep):
    try:
        repo.delete(entry_id)
    except GlossaryEntryNotFoundError:
        raise HTTPException(status_code=404, detail="Glossary entry not found")
    return Response(status_code=204)
