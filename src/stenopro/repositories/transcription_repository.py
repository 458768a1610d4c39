"""Repository for transcription record persistence."""

from collections.abc import Callable
from contextlib import AbstractContextManager

from sqlalchemy import func, or_, update
from sqlmodel import Session, col, select

from stenopro.db_models import Transcription, utcnow
from stenopro.domain.status import TranscriptionStatus
from stenopro.exceptions import StaleTranscriptionError, TranscriptionNotFoundError
from stenopro.logging import setup_logging

logger = setup_logging()

SessionFactory = Callable[[], AbstractContextManager[Session]]


def _escape_like(term: str) -> str:
    """Makes ``%`` and ``_`` in a search term match literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


SORTABLE_COLUMNS = {
    "created_at": Transcription.created_at,
    "updated_at": Transcription.updated_at,
    "title": Transcription.title,
}


class TranscriptionRepository:
    """
    Handles database operations for transcription records.

    Lifecycle writes go through ``update``, which is guarded by the record's
    version column so that a superseded pipeline run cannot overwrite the
    state written by a newer one. Editor writes go through ``edit`` and do
    not take part in that protocol.
    """

    def __init__(self, session_factory: SessionFactory):
        """
        Initializes the repository.

        Args:
            session_factory: Callable that returns a SQLModel Session context manager.
        """
        self._session_factory = session_factory

    def create(self, transcription: Transcription) -> Transcription:
        """Inserts a new record and returns it with its generated id."""
        with self._session_factory() as db_session:
            db_session.add(transcription)
            db_session.commit()
            db_session.refresh(transcription)

        logger.info(
            "Transcription created",
            extra={"transcription_id": transcription.id, "title": transcription.title},
        )
        return transcription

    def get_by_id(self, transcription_id: int) -> Transcription:
        """
        Retrieves a single record.

        Raises:
            TranscriptionNotFoundError: If the record does not exist.
        """
        with self._session_factory() as db_session:
            transcription = db_session.get(Transcription, transcription_id)

        if transcription is None:
            raise TranscriptionNotFoundError(transcription_id)
        return transcription

    def update(
        self,
        transcription_id: int,
        expected_version: int,
        *,
        initial_final_text: str | None = None,
        **fields,
    ) -> int:
        """
        Atomically applies a lifecycle write.

        Args:
            transcription_id: The record to update.
            expected_version: Version the caller last observed.
            initial_final_text: Written to ``final_text`` only if that column
                is still empty, so a human edit is never replaced.
            **fields: Column values to set.

        Returns:
            The record's new version.

        Raises:
            TranscriptionNotFoundError: If the record does not exist.
            StaleTranscriptionError: If another writer bumped the version.
        """
        values = dict(fields)
        if initial_final_text is not None:
            values["final_text"] = func.coalesce(
                Transcription.final_text, initial_final_text
            )
        values["version"] = expected_version + 1
        values["updated_at"] = utcnow()

        statement = (
            update(Transcription)
            .where(
                col(Transcription.id) == transcription_id,
                col(Transcription.version) == expected_version,
            )
            .values(**values)
        )

        with self._session_factory() as db_session:
            result = db_session.exec(statement)
            matched = result.rowcount
            db_session.commit()

        if matched == 0:
            # Distinguish a deleted record from a lost race.
            self.get_by_id(transcription_id)
            raise StaleTranscriptionError(transcription_id, expected_version)

        return expected_version + 1

    def edit(self, transcription_id: int, **fields) -> Transcription:
        """
        Applies free-form editor changes (title, room, final text, prompt).

        Raises:
            TranscriptionNotFoundError: If the record does not exist.
        """
        with self._session_factory() as db_session:
            transcription = db_session.get(Transcription, transcription_id)
            if transcription is None:
                raise TranscriptionNotFoundError(transcription_id)

            for name, value in fields.items():
                setattr(transcription, name, value)
            transcription.updated_at = utcnow()

            db_session.add(transcription)
            db_session.commit()
            db_session.refresh(transcription)

        logger.info(
            "Transcription edited",
            extra={"transcription_id": transcription_id, "fields": sorted(fields)},
        )
        return transcription

    def list_page(
        self,
        page: int,
        limit: int,
        status: TranscriptionStatus | None = None,
        room: str | None = None,
        search: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> tuple[list[Transcription], int]:
        """
        Retrieves one page of records plus the total matching count.

        ``search`` matches the title or the final text, case-insensitively.
        """
        conditions = []
        if status is not None:
            conditions.append(col(Transcription.status) == status)
        if room:
            conditions.append(col(Transcription.room) == room)
        if search:
            pattern = f"%{_escape_like(search)}%"
            conditions.append(
                or_(
                    col(Transcription.title).ilike(pattern, escape="\\"),
                    col(Transcription.final_text).ilike(pattern, escape="\\"),
                )
            )

        sort_column = col(SORTABLE_COLUMNS[sort_by])
        order = sort_column.desc() if sort_order == "desc" else sort_column.asc()

        statement = (
            select(Transcription)
            .where(*conditions)
            .order_by(order, col(Transcription.id))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        count_statement = (
            select(func.count()).select_from(Transcription).where(*conditions)
        )

        with self._session_factory() as db_session:
            items = list(db_session.exec(statement).all())
            total = db_session.exec(count_statement).one()

        return items, total

    def delete(self, transcription_id: int) -> None:
        """
        Deletes a record.

        Raises:
            TranscriptionNotFoundError: If the record does not exist.
        """
        with self._session_factory() as db_session:
            transcription = db_session.get(Transcription, transcription_id)
            if transcription is None:
                raise TranscriptionNotFoundError(transcription_id)
            db_session.delete(transcription)
            db_session.commit()

        logger.info("Transcription deleted", extra={"transcription_id": transcription_id})
