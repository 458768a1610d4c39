"""Repository for system prompts and reusable prompt templates."""

from sqlalchemy import update
from sqlmodel import col, select

from stenopro.db_models import PromptTemplate, SystemPrompt
from stenopro.exceptions import DuplicatePromptVersionError, PromptNotFoundError
from stenopro.logging import setup_logging

from .transcription_repository import SessionFactory

logger = setup_logging()


class PromptRepository:
    """
    Handles database operations for prompts.

    At most one system prompt is active at a time; activating one
    deactivates the others in the same transaction.
    """

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    def get_active_content(self) -> str | None:
        """Returns the text of the active system prompt, if any."""
        statement = (
            select(SystemPrompt)
            .where(col(SystemPrompt.is_active).is_(True))
            .order_by(col(SystemPrompt.version).desc())
        )
        with self._session_factory() as db_session:
            prompt = db_session.exec(statement).first()
        return prompt.content if prompt else None

    def get_active(self) -> SystemPrompt:
        """
        Raises:
            PromptNotFoundError: If no system prompt is active.
        """
        statement = (
            select(SystemPrompt)
            .where(col(SystemPrompt.is_active).is_(True))
            .order_by(col(SystemPrompt.version).desc())
        )
        with self._session_factory() as db_session:
            prompt = db_session.exec(statement).first()
        if prompt is None:
            raise PromptNotFoundError("Active system prompt")
        return prompt

    def list_prompts(self) -> list[SystemPrompt]:
        statement = select(SystemPrompt).order_by(col(SystemPrompt.version).desc())
        with self._session_factory() as db_session:
            return list(db_session.exec(statement).all())

    def create_prompt(self, version: int, content: str, is_active: bool) -> SystemPrompt:
        """
        Stores a new system prompt version.

        Raises:
            DuplicatePromptVersionError: If the version number is taken.
        """
        prompt = SystemPrompt(version=version, content=content, is_active=is_active)
        existing = select(SystemPrompt).where(col(SystemPrompt.version) == version)

        with self._session_factory() as db_session:
            if db_session.exec(existing).first() is not None:
                raise DuplicatePromptVersionError(version)
            if is_active:
                db_session.exec(update(SystemPrompt).values(is_active=False))
            db_session.add(prompt)
            db_session.commit()
            db_session.refresh(prompt)

        logger.info(
            "System prompt created",
            extra={"version": version, "is_active": is_active},
        )
        return prompt

    def activate(self, prompt_id: int) -> SystemPrompt:
        """
        Makes one system prompt the active one.

        Raises:
            PromptNotFoundError: If the prompt does not exist.
        """
        with self._session_factory() as db_session:
            prompt = db_session.get(SystemPrompt, prompt_id)
            if prompt is None:
                raise PromptNotFoundError(f"System prompt {prompt_id}")
            db_session.exec(update(SystemPrompt).values(is_active=False))
            prompt.is_active = True
            db_session.add(prompt)
            db_session.commit()
            db_session.refresh(prompt)

        logger.info("System prompt activated", extra={"version": prompt.version})
        return prompt

    def list_templates(self) -> list[PromptTemplate]:
        statement = select(PromptTemplate).order_by(col(PromptTemplate.name))
        with self._session_factory() as db_session:
            return list(db_session.exec(statement).all())

    def get_template(self, template_id: int) -> PromptTemplate:
        """
        Raises:
            PromptNotFoundError: If the template does not exist.
        """
        with self._session_factory() as db_session:
            template = db_session.get(PromptTemplate, template_id)
        if template is None:
            raise PromptNotFoundError(f"Prompt template {template_id}")
        return template

    def get_default_template(self) -> PromptTemplate:
        """
        Raises:
            PromptNotFoundError: If no template is marked as default.
        """
        statement = select(PromptTemplate).where(col(PromptTemplate.is_default).is_(True))
        with self._session_factory() as db_session:
            template = db_session.exec(statement).first()
        if template is None:
            raise PromptNotFoundError("Default prompt template")
        return template

    def update_template(self, template_id: int, **fields) -> PromptTemplate:
        """
        Applies changes to a template; marking it default unmarks the others.

        Raises:
            PromptNotFoundError: If the template does not exist.
        """
        with self._session_factory() as db_session:
            template = db_session.get(PromptTemplate, template_id)
            if template is None:
                raise PromptNotFoundError(f"Prompt template {template_id}")
            if fields.get("is_default"):
                db_session.exec(update(PromptTemplate).values(is_default=False))
            for name, value in fields.items():
                setattr(template, name, value)
            db_session.add(template)
            db_session.commit()
            db_session.refresh(template)

        logger.info(
            "Prompt template updated",
            extra={"template_id": template_id, "fields": sorted(fields)},
        )
        return template

    def create_template(
        self, name: str, prompt_text: str, is_default: bool = False
    ) -> PromptTemplate:
        template = PromptTemplate(name=name, prompt_text=prompt_text, is_default=is_default)
        with self._session_factory() as db_session:
            if is_default:
                db_session.exec(update(PromptTemplate).values(is_default=False))
            db_session.add(template)
            db_session.commit()
            db_session.refresh(template)
        return template

    def delete_template(self, template_id: int) -> None:
        """
        Raises:
            PromptNotFoundError: If the template does not exist.
        """
        with self._session_factory() as db_session:
            template = db_session.get(PromptTemplate, template_id)
            if template is None:
                raise PromptNotFoundError(f"Prompt template {template_id}")
            db_session.delete(template)
            db_session.commit()
