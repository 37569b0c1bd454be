from fastapi import APIRouter, Body, Depends, Response, status

from notes_api.api.deps import get_current_principal, get_note_service, get_page_request
from notes_api.schemas.error import ErrorResponse
from notes_api.schemas.note import CreateNoteDTO, PublicNoteDTO
from notes_api.schemas.page import Page, PageRequest
from notes_api.security.principal import Principal
from notes_api.services.note_service import NoteService

router = APIRouter(
    prefix="/notes",
    tags=["notes"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)

# All note routes act on the caller's own notes; the owner id always comes from the principal.


@router.post("", status_code=status.HTTP_201_CREATED, response_class=Response)
async def create_note(
    dto: CreateNoteDTO | None = Body(None),
    principal: Principal = Depends(get_current_principal),
    service: NoteService = Depends(get_note_service),
):
    note_id = await service.create(dto, principal.id)
    return Response(status_code=status.HTTP_201_CREATED, headers={"Location": f"/notes/{note_id}"})


@router.get("", response_model=Page[PublicNoteDTO])
async def list_notes(
    page_request: PageRequest = Depends(get_page_request),
    principal: Principal = Depends(get_current_principal),
    service: NoteService = Depends(get_note_service),
):
    return await service.get_page(page_request, principal.id)


@router.get("/{note_id}", response_model=PublicNoteDTO)
async def get_note(
    note_id: int,
    principal: Principal = Depends(get_current_principal),
    service: NoteService = Depends(get_note_service),
):
    return await service.get(note_id, principal.id)


@router.put("/{note_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def put_note(
    note_id: int,
    dto: CreateNoteDTO | None = Body(None),
    principal: Principal = Depends(get_current_principal),
    service: NoteService = Depends(get_note_service),
):
    """Create the note with this id, or replace its title and content."""
    await service.put(note_id, dto, principal.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_note(
    note_id: int,
    principal: Principal = Depends(get_current_principal),
    service: NoteService = Depends(get_note_service),
):
    await service.delete_by_id(note_id, principal.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
