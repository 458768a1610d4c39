"""Repository for glossary entries."""

from sqlalchemy import delete, func, or_
from sqlmodel import col, select

from stenopro.db_models import GlossaryEntry
from stenopro.domain.models import GlossaryTerm
from stenopro.exceptions import DuplicateGlossaryEntryError, GlossaryEntryNotFoundError
from stenopro.logging import setup_logging

from .transcription_repository import SessionFactory

logger = setup_logging()


class GlossaryRepository:
    """Handles database operations for glossary entries."""

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    def entries_for_transcription(self, transcription_id: int) -> list[GlossaryTerm]:
        """Returns every global entry plus the entries scoped to one record."""
        statement = (
            select(GlossaryEntry)
            .where(
                or_(
                    col(GlossaryEntry.is_global).is_(True),
                    col(GlossaryEntry.transcription_id) == transcription_id,
                )
            )
            .order_by(col(GlossaryEntry.name))
        )
        with self._session_factory() as db_session:
            entries = db_session.exec(statement).all()

        return [GlossaryTerm(name=entry.name, info=entry.info) for entry in entries]

    def list_entries(
        self, transcription_id: int | None = None, global_only: bool = False
    ) -> list[GlossaryEntry]:
        """
        Lists entries ordered by name.

        With ``global_only`` only global entries are returned; with a
        ``transcription_id`` the record's entries and the global ones; with
        neither, everything.
        """
        statement = select(GlossaryEntry)
        if global_only:
            statement = statement.where(col(GlossaryEntry.is_global).is_(True))
        elif transcription_id is not None:
            statement = statement.where(
                or_(
                    col(GlossaryEntry.transcription_id) == transcription_id,
                    col(GlossaryEntry.is_global).is_(True),
                )
            )

        with self._session_factory() as db_session:
            return list(db_session.exec(statement.order_by(col(GlossaryEntry.name))).all())

    def create(
        self,
        name: str,
        info: str | None,
        transcription_id: int | None,
        is_global: bool,
    ) -> GlossaryEntry:
        """
        Adds a term to the global glossary or to one record's glossary.

        Raises:
            DuplicateGlossaryEntryError: If the name already exists in that scope.
        """
        scope = (
            col(GlossaryEntry.is_global).is_(True)
            if is_global
            else col(GlossaryEntry.transcription_id) == transcription_id
        )
        duplicate = select(GlossaryEntry).where(
            func.lower(GlossaryEntry.name) == name.lower(), scope
        )
        entry = GlossaryEntry(
            name=name,
            info=info,
            transcription_id=None if is_global else transcription_id,
            is_global=is_global,
        )

        with self._session_factory() as db_session:
            if db_session.exec(duplicate).first() is not None:
                raise DuplicateGlossaryEntryError(name)
            db_session.add(entry)
            db_session.commit()
            db_session.refresh(entry)

        logger.info(
            "Glossary entry created",
            extra={"entry_id": entry.id, "is_global": is_global},
        )
        return entry

    def import_terms(
        self,
        terms: list[GlossaryTerm],
        transcription_id: int | None,
        is_global: bool,
    ) -> int:
        """Inserts many terms in one transaction and returns how many were added."""
        entries = [
            GlossaryEntry(
                name=term.name,
                info=term.info,
                transcription_id=None if is_global else transcription_id,
                is_global=is_global,
            )
            for term in terms
        ]
        with self._session_factory() as db_session:
            db_session.add_all(entries)
            db_session.commit()

        logger.info("Glossary terms imported", extra={"count": len(entries)})
        return len(entries)

    def delete(self, entry_id: int) -> None:
        """
        Deletes one entry.

        Raises:
            GlossaryEntryNotFoundError: If the entry does not exist.
        """
        with self._session_factory() as db_session:
            entry = db_session.get(GlossaryEntry, entry_id)
            if entry is None:
                raise GlossaryEntryNotFoundError(entry_id)
            db_session.delete(entry)
            db_session.commit()

    def delete_for_transcription(self, transcription_id: int) -> None:
        """Removes the entries scoped to a record that is being deleted."""
        statement = delete(GlossaryEntry).where(
            col(GlossaryEntry.transcription_id) == transcription_id
        )
        with self._session_factory() as db_session:
            db_session.exec(statement)
            db_session.commit()
