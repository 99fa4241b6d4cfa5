"""
Incoming letter register.

Every operation takes the acting user explicitly. Visibility and ownership
follow one rule, :func:`can_access`: staff work only with letters they
registered themselves, every other role works with all incoming letters.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from correspondence.core.i18n import current_locale, trans
from correspondence.core.logger import logger
from correspondence.crud import letters as crud
from correspondence.models import Classification, Letter, LetterType, User
from correspondence.models.user import ROLE_STAFF
from correspondence.schemas.letter import LetterStoreIn, LetterUpdateIn
from correspondence.security.sanitizer import InputSanitizer
from correspondence.services.results import ErrorKind, Failure, Result, Success
from correspondence.services.storage import ATTACHMENTS_NAMESPACE, LocalBlobStorage

ALLOWED_EXTENSIONS = ("png", "jpg", "jpeg", "pdf")


@dataclass
class UploadedFile:
    """An uploaded file already read into memory."""
    filename: str
    content: bytes


@dataclass
class LetterFilters:
    search: Optional[str] = None
    since: Optional[date] = None
    until: Optional[date] = None
    filter: Optional[str] = None
    page: int = 1


@dataclass
class PrintView:
    letters: List[Letter]
    title: str
    config: Dict[str, str]


@dataclass
class EditForm:
    letter: Letter
    classifications: List[Classification]


def can_access(user: User, letter: Letter) -> bool:
    return not (user.role == ROLE_STAFF and user.id != letter.user_id)


def client_extension(filename: str) -> str:
    """Extension as sent by the client: text after the last dot, case kept."""
    name = InputSanitizer.client_basename(filename)
    return name.rsplit(".", 1)[1] if "." in name else ""


def is_allowed_extension(extension: str) -> bool:
    return extension.lower() in ALLOWED_EXTENSIONS


def stored_filename(filename: str, timestamp: int) -> str:
    """``<unix-timestamp>-<original name>`` with spaces turned into hyphens."""
    return f"{timestamp}-{InputSanitizer.client_basename(filename)}".replace(" ", "-")


class LetterService:

    def __init__(
        self,
        db: Session,
        storage: LocalBlobStorage,
        clock: Callable[[], float] = time.time,
        locale: Optional[str] = None,
    ):
        self.db = db
        self.storage = storage
        self._clock = clock
        self.locale = locale or current_locale()

    # -- reads -----------------------------------------------------------

    def _scoped(self, filters: LetterFilters, user: User, with_agenda: bool):
        stmt = crud.visible_to(crud.incoming_query(), user)
        if with_agenda:
            stmt = crud.agenda(stmt, filters.since, filters.until, filters.filter)
        return crud.search(stmt, filters.search)

    def list(self, filters: LetterFilters, user: User) -> crud.Page:
        stmt = self._scoped(filters, user, with_agenda=False)
        return crud.paginate(self.db, stmt, filters.page, crud.page_size(self.db))

    def agenda(self, filters: LetterFilters, user: User) -> crud.Page:
        stmt = self._scoped(filters, user, with_agenda=True)
        return crud.paginate(self.db, stmt, filters.page, crud.page_size(self.db))

    def print_view(self, filters: LetterFilters, user: User, locale: Optional[str] = None) -> PrintView:
        locale = locale or self.locale
        agenda_label = trans("menu.agenda.menu", locale)
        letter_label = trans("menu.agenda.incoming_letter", locale)
        title = f"{agenda_label} {letter_label}" if locale == "id" else f"{letter_label} {agenda_label}"

        stmt = self._scoped(filters, user, with_agenda=True)
        return PrintView(
            letters=crud.all_matching(self.db, stmt),
            title=title,
            config=crud.config_map(self.db),
        )

    def create_form(self) -> List[Classification]:
        return crud.list_classifications(self.db)

    def _authorized_letter(self, letter_id: int, user: User, action: str) -> Result:
        letter = crud.get_incoming(self.db, letter_id)
        if letter is None:
            return Failure(ErrorKind.NOT_FOUND, "Letter not found")
        if not can_access(user, letter):
            logger.warning(f"User {user.id} denied {action} on letter {letter_id}")
            return Failure(ErrorKind.FORBIDDEN, f"You are not authorized to {action} this letter")
        return Success(letter)

    def show(self, letter_id: int, user: User) -> Result:
        return self._authorized_letter(letter_id, user, "view")

    def edit_form(self, letter_id: int, user: User) -> Result:
        result = self._authorized_letter(letter_id, user, "edit")
        if not result.ok:
            return result
        return Success(EditForm(letter=result.value, classifications=crud.list_classifications(self.db)))

    # -- writes ----------------------------------------------------------

    def _check_fields(self, data: LetterUpdateIn, exclude_id: Optional[int] = None) -> Optional[Failure]:
        if self.db.get(Classification, data.classification_code) is None:
            return Failure(ErrorKind.VALIDATION, "The selected classification is invalid.")
        if crud.reference_taken(self.db, data.reference_number, exclude_id=exclude_id):
            return Failure(ErrorKind.VALIDATION, "The reference number has already been taken.")
        return None

    def _store_attachments(self, letter: Letter, files: Iterable[UploadedFile], uploader: User, written: List[str]) -> int:
        """Runs the upload pipeline; unsupported files are skipped without notice."""
        count = 0
        for upload in files:
            if not upload.filename:
                continue
            extension = client_extension(upload.filename)
            if not is_allowed_extension(extension):
                logger.debug(f"Skipping attachment {upload.filename!r}: unsupported extension")
                continue

            filename = stored_filename(upload.filename, int(self._clock()))
            self.storage.store(upload.content, ATTACHMENTS_NAMESPACE, filename)
            written.append(filename)

            crud.add_attachment(
                self.db,
                letter_id=letter.id,
                user_id=uploader.id,
                filename=filename,
                extension=extension,
            )
            count += 1
        return count

    def _discard(self, filenames: Iterable[str]) -> None:
        """
        Remove blobs no attachment row points at any more.

        Stored names only carry whole seconds, so two letters can share one
        blob; it stays until the last row referencing it is gone. Call this
        once the session's commit or rollback has settled.
        """
        filenames = list(dict.fromkeys(filenames))
        try:
            in_use = crud.referenced_filenames(self.db, filenames)
        except SQLAlchemyError as e:
            logger.error(f"Could not check blob references, keeping {len(filenames)} blob(s): {e}")
            return

        for filename in filenames:
            if filename in in_use:
                logger.info(f"Blob {filename} is still referenced, keeping it")
                continue
            try:
                self.storage.delete(ATTACHMENTS_NAMESPACE, filename)
            except OSError as e:
                logger.warning(f"Could not remove blob {filename}: {e}")

    def create(self, data: LetterStoreIn, files: Iterable[UploadedFile], user: User) -> Result:
        if data.type != LetterType.INCOMING.value:
            return Failure(ErrorKind.VALIDATION, trans("menu.transaction.incoming_letter", self.locale))

        written: List[str] = []
        try:
            failure = self._check_fields(data)
            if failure:
                return failure

            letter = Letter(
                **data.letter_fields(),
                type=LetterType.INCOMING.value,
                user_id=user.id,
            )
            self.db.add(letter)
            self.db.flush()  # letter.id

            count = self._store_attachments(letter, files, user, written)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            self._discard(written)
            logger.error(f"Registering incoming letter failed: {e}")
            return Failure(ErrorKind.UNEXPECTED, str(e))

        logger.info(f"Incoming letter {letter.id} registered by user {user.id} with {count} attachment(s)")
        return Success(letter)

    def update(self, letter_id: int, data: LetterUpdateIn, files: Iterable[UploadedFile], user: User) -> Result:
        result = self._authorized_letter(letter_id, user, "edit")
        if not result.ok:
            return result
        letter = result.value

        written: List[str] = []
        try:
            failure = self._check_fields(data, exclude_id=letter.id)
            if failure:
                return failure

            for key, value in data.letter_fields().items():
                setattr(letter, key, value)

            count = self._store_attachments(letter, files, user, written)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            self._discard(written)
            logger.error(f"Updating letter {letter_id} failed: {e}")
            return Failure(ErrorKind.UNEXPECTED, str(e))

        logger.info(f"Letter {letter.id} updated by user {user.id} (+{count} attachment(s))")
        return Success(letter)

    def destroy(self, letter_id: int, user: User) -> Result:
        result = self._authorized_letter(letter_id, user, "delete")
        if not result.ok:
            return result
        letter = result.value

        filenames = [a.filename for a in letter.attachments]
        try:
            self.db.delete(letter)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Deleting letter {letter_id} failed: {e}")
            return Failure(ErrorKind.UNEXPECTED, str(e))

        self._discard(filenames)
        logger.info(f"Letter {letter_id} deleted by user {user.id}")
        return Success()
