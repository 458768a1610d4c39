"""System prompt and prompt template endpoints."""

from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Response

from stenopro.dependencies import get_prompt_repository
from stenopro.exceptions import DuplicatePromptVersionError, PromptNotFoundError
from stenopro.repositories import PromptRepository
from stenopro.request_models import (
    PromptTemplateCreateRequest,
    PromptTemplateUpdateRequest,
    SystemPromptCreateRequest,
)
from stenopro.response_models import PromptTemplateResponse, SystemPromptResponse

prompts_router = APIRouter(prefix="/prompts", tags=["prompts"])
templates_router = APIRouter(prefix="/prompt-templates", tags=["prompts"])

PromptRepositoryDep = Annotated[PromptRepository, Depends(get_prompt_repository)]


@prompts_router.get("", response_model=List[SystemPromptResponse])
def list_system_prompts(repo: PromptRepositoryDep):
    """Returns every system prompt, newest version first."""
    return repo.list_prompts()


@prompts_router.get("/active", response_model=SystemPromptResponse)
def get_active_system_prompt(repo: PromptRepositoryDep):
    try:
        return repo.get_active()
    except PromptNotFoundError:
        raise HTTPException(status_code=404, detail="No active system prompt")


@prompts_router.post("", response_model=SystemPromptResponse, status_code=201)
def create_system_prompt(body: SystemPromptCreateRequest, repo: PromptRepositoryDep):
    """Stores a new prompt version, activating it when requested."""
    try:
        return repo.create_prompt(
            version=body.version,
            content=body.content,
            is_active=body.is_active,
        )
    except DuplicatePromptVersionError as e:
        raise HTTPException(status_code=409, detail=str(e))


@prompts_router.post("/{prompt_id}/activate", response_model=SystemPromptResponse)
def activate_system_prompt(prompt_id: int, repo: PromptRepositoryDep):
    try:
        return repo.activate(prompt_id)
    except PromptNotFoundError:
        raise HTTPException(status_code=404, detail="System prompt not found")


@templates_router.get("", response_model=List[PromptTemplateResponse])
def list_prompt_templates(repo: PromptRepositoryDep):
    return repo.list_templates()


@templates_router.get("/default", response_model=PromptTemplateResponse)
def get_default_prompt_template(repo: PromptRepositoryDep):
    try:
        return repo.get_default_template()
    except PromptNotFoundError:
        raise HTTPException(status_code=404, detail="No default prompt template")


@templates_router.post("", response_model=PromptTemplateResponse, status_code=201)
def create_prompt_template(body: PromptTemplateCreateRequest, repo: PromptRepositoryDep):
    return repo.create_template(
        name=body.name,
        prompt_text=body.prompt_text,
        is_default=body.is_default,
    )


@templates_router.patch("/{template_id}", response_model=PromptTemplateResponse)
def update_prompt_template(
    template_id: int,
    body: PromptTemplateUpdateRequest,
    repo: PromptRepositoryDep,
):
    """Renames, rewrites or marks a template as the default one."""
    try:
        return repo.update_template(template_id, **body.model_dump(exclude_unset=True))
    except PromptNotFoundError:
        raise HTTPException(status_code=404, detail="Prompt template not found")


@templates_router.delete("/{template_id}", status_code=204)
def delete_prompt_template(template_id: int, repo: PromptRepositoryDep):
    try:
        repo.delete_template(template_id)
    except PromptNotFoundError:
        raise HTTPException(status_code=404, detail="Prompt template not found")
    return Response(status_code=204)
