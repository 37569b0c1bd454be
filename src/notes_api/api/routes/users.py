from fastapi import APIRouter, Depends, Response, status

from notes_api.api.deps import get_page_request, get_user_service, owner_or_admin, require_admin
from notes_api.schemas.error import ErrorResponse
from notes_api.schemas.page import Page, PageRequest
from notes_api.schemas.user import (
    CreateUserDTO,
    PatchEmailDTO,
    PatchPasswordDTO,
    PatchUsernameDTO,
    PublicUserDTO,
)
from notes_api.security.principal import Principal
from notes_api.services.user_service import UserService

router = APIRouter(
    prefix="/users",
    tags=["users"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)


@router.post("", status_code=status.HTTP_201_CREATED, response_class=Response)
async def create_user(dto: CreateUserDTO, service: UserService = Depends(get_user_service)):
    """Public sign-up. Answers 201 with the new resource in the Location header."""
    user_id = await service.create(dto)
    return Response(status_code=status.HTTP_201_CREATED, headers={"Location": f"/users/{user_id}"})


@router.get("", response_model=Page[PublicUserDTO])
async def list_users(
    page_request: PageRequest = Depends(get_page_request),
    _admin: Principal = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return await service.get_page(page_request)


@router.get("/{user_id}", response_model=PublicUserDTO)
async def get_user(user_id: int = Depends(owner_or_admin), service: UserService = Depends(get_user_service)):
    return await service.get_by_id(user_id)


@router.patch("/{user_id}/username", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def patch_username(
    dto: PatchUsernameDTO,
    user_id: int = Depends(owner_or_admin),
    service: UserService = Depends(get_user_service),
):
    await service.patch_username_by_id(user_id, dto)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{user_id}/email", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def patch_email(
    dto: PatchEmailDTO,
    user_id: int = Depends(owner_or_admin),
    service: UserService = Depends(get_user_service),
):
    await service.patch_email_by_id(user_id, dto)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{user_id}/password", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def patch_password(
    dto: PatchPasswordDTO,
    user_id: int = Depends(owner_or_admin),
    service: UserService = Depends(get_user_service),
):
    await service.patch_password_by_id(user_id, dto)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_user(user_id: int = Depends(owner_or_admin), service: UserService = Depends(get_user_service)):
    """Deletes the account together with all of its notes."""
    await service.delete_by_id(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
