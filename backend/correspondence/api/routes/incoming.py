from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.parse import urlsplit

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from correspondence.core.i18n import current_locale, trans
from correspondence.core.security import get_current_user
from correspondence.db.session import get_db
from correspondence.models.user import User
from correspondence.schemas.letter import LetterStoreIn, LetterUpdateIn
from correspondence.services.letters import LetterFilters, LetterService, UploadedFile
from correspondence.services.results import ErrorKind, Failure
from correspondence.services.storage import LocalBlobStorage, get_storage


router = APIRouter(prefix='/incoming', tags=['incoming'])

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[2] / 'templates'))
templates.env.globals['trans'] = trans


def get_letter_service(
    db: Session = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
) -> LetterService:
    return LetterService(db, storage)


# -- helpers -----------------------------------------------------------------

def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _filters(request: Request) -> LetterFilters:
    params = request.query_params
    try:
        page = int(params.get('page') or 1)
    except ValueError:
        page = 1
    return LetterFilters(
        search=params.get('search') or None,
        since=_parse_date(params.get('since')),
        until=_parse_date(params.get('until')),
        filter=params.get('filter') or None,
        page=page,
    )


def _flash(request: Request, kind: str, message: str) -> None:
    request.session['flash'] = {'type': kind, 'message': message}


def _render(request: Request, name: str, context: dict):
    context = {
        'user': None,
        'locale': current_locale(),
        'flash': request.session.pop('flash', None),
        **context,
    }
    return templates.TemplateResponse(request, name, context)


def _same_origin(request: Request, url: str) -> bool:
    target = urlsplit(url)
    if not target.scheme and not target.netloc:
        # path on this host; browsers read "//host" and "/\host" as another host
        return url.startswith('/') and url[1:2] not in ('/', '\\')
    return (target.scheme, target.netloc) == (request.url.scheme, request.url.netloc)


def _back(request: Request, fallback: str) -> RedirectResponse:
    """Redirect to the page the form came from, or ``fallback`` when it was another site."""
    referer = request.headers.get('referer')
    target = referer if referer and _same_origin(request, referer) else fallback
    return RedirectResponse(target, status_code=status.HTTP_302_FOUND)


def _to_index(request: Request) -> RedirectResponse:
    return RedirectResponse(str(request.url_for('incoming_index')), status_code=status.HTTP_302_FOUND)


def _raise_for(failure: Failure) -> None:
    """Access problems end the request; everything else becomes a flash on the way back."""
    if failure.kind == ErrorKind.FORBIDDEN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=failure.message)
    if failure.kind == ErrorKind.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=failure.message)


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = '.'.join(str(p) for p in err.get('loc', ()))
        parts.append(f"{field}: {err.get('msg')}" if field else err.get('msg'))
    return '; '.join(parts)


async def _read_form(request: Request) -> Tuple[dict, List[UploadedFile]]:
    form = await request.form()
    data = {}
    files: List[UploadedFile] = []
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key in ('attachments', 'attachments[]') and value.filename:
                files.append(UploadedFile(filename=value.filename, content=await value.read()))
        else:
            data[key] = value
    return data, files


# -- listing -----------------------------------------------------------------

@router.get('', name='incoming_index')
def index(
    request: Request,
    service: LetterService = Depends(get_letter_service),
    current_user: User = Depends(get_current_user),
):
    filters = _filters(request)
    return _render(request, 'incoming/index.html', {
        'user': current_user,
        'data': service.list(filters, current_user),
        'search': filters.search,
    })


@router.get('/agenda', name='incoming_agenda')
def agenda(
    request: Request,
    service: LetterService = Depends(get_letter_service),
    current_user: User = Depends(get_current_user),
):
    filters = _filters(request)
    return _render(request, 'incoming/agenda.html', {
        'user': current_user,
        'data': service.agenda(filters, current_user),
        'search': filters.search,
        'since': filters.since,
        'until': filters.until,
        'filter': filters.filter,
        'query': request.url.query,
    })


@router.get('/print', name='incoming_print')
def print_agenda(
    request: Request,
    service: LetterService = Depends(get_letter_service),
    current_user: User = Depends(get_current_user),
):
    filters = _filters(request)
    view = service.print_view(filters, current_user)
    return _render(request, 'incoming/print.html', {
        'user': current_user,
        'data': view.letters,
        'title': view.title,
        'config': view.config,
        'search': filters.search,
        'since': filters.since,
        'until': filters.until,
        'filter': filters.filter,
    })


# -- create ------------------------------------------------------------------

@router.get('/create', name='incoming_create')
def create_form(
    request: Request,
    service: LetterService = Depends(get_letter_service),
    current_user: User = Depends(get_current_user),
):
    return _render(request, 'incoming/create.html', {
        'user': current_user,
        'classifications': service.create_form(),
    })


@router.post('', name='incoming_store')
async def store(
    request: Request,
    service: LetterService = Depends(get_letter_service),
    current_user: User = Depends(get_current_user),
):
    fallback = str(request.url_for('incoming_create'))
    data, files = await _read_form(request)

    try:
        payload = LetterStoreIn(**data)
    except ValidationError as e:
        _flash(request, 'error', _validation_message(e))
        return _back(request, fallback)

    result = service.create(payload, files, current_user)
    if not result.ok:
        _flash(request, 'error', result.message)
        return _back(request, fallback)

    _flash(request, 'success', trans('menu.general.success'))
    return _to_index(request)


# -- single letter -----------------------------------------------------------

@router.get('/{letter_id}', name='incoming_show')
def show(
    letter_id: int,
    request: Request,
    service: LetterService = Depends(get_letter_service),
    current_user: User = Depends(get_current_user),
):
    result = service.show(letter_id, current_user)
    if not result.ok:
        _raise_for(result)
    return _render(request, 'incoming/show.html', {
        'user': current_user,
        'data': result.value,
    })


@router.get('/{letter_id}/edit', name='incoming_edit')
def edit_form(
    letter_id: int,
    request: Request,
    service: LetterService = Depends(get_letter_service),
    current_user: User = Depends(get_current_user),
):
    result = service.edit_form(letter_id, current_user)
    if not result.ok:
        _raise_for(result)
    return _render(request, 'incoming/edit.html', {
        'user': current_user,
        'data': result.value.letter,
        'classifications': result.value.classifications,
    })


async def _update(letter_id: int, request: Request, service: LetterService, current_user: User):
    fallback = str(request.url_for('incoming_edit', letter_id=letter_id))

    # ownership before anything in the request body is looked at
    access = service.show(letter_id, current_user)
    if not access.ok:
        _raise_for(access)

    data, files = await _read_form(request)
    try:
        payload = LetterUpdateIn(**data)
    except ValidationError as e:
        _flash(request, 'error', _validation_message(e))
        return _back(request, fallback)

    result = service.update(letter_id, payload, files, current_user)
    if not result.ok:
        _raise_for(result)
        _flash(request, 'error', result.message)
        return _back(request, fallback)

    _flash(request, 'success', trans('menu.general.success'))
    return _back(request, fallback)


def _destroy(letter_id: int, request: Request, service: LetterService, current_user: User):
    result = service.destroy(letter_id, current_user)
    if not result.ok:
        _raise_for(result)
        _flash(request, 'error', result.message)
        return _back(request, str(request.url_for('incoming_show', letter_id=letter_id)))

    _flash(request, 'success', trans('menu.general.success'))
    return _to_index(request)


@router.put('/{letter_id}', name='incoming_update')
@router.patch('/{letter_id}')
async def update(
    letter_id: int,
    request: Request,
    service: LetterService = Depends(get_letter_service),
    current_user: User = Depends(get_current_user),
):
    return await _update(letter_id, request, service, current_user)


@router.delete('/{letter_id}', name='incoming_destroy')
def destroy(
    letter_id: int,
    request: Request,
    service: LetterService = Depends(get_letter_service),
    current_user: User = Depends(get_current_user),
):
    return _destroy(letter_id, request, service, current_user)


@router.post('/{letter_id}', name='incoming_method_override')
async def method_override(
    letter_id: int,
    request: Request,
    service: LetterService = Depends(get_letter_service),
    current_user: User = Depends(get_current_user),
):
    """HTML forms only speak GET/POST; `_method` selects PUT, PATCH or DELETE."""
    form = await request.form()
    method = str(form.get('_method', '')).upper()
    if method in ('PUT', 'PATCH'):
        return await _update(letter_id, request, service, current_user)
    if method == 'DELETE':
        return _destroy(letter_id, request, service, current_user)
    raise HTTPException(status_code=status.HTTP_405_METHOD_NOT_ALLOWED, detail='Method not allowed')
