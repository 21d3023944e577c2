"""
User endpoints.

Registration, login and lookups are public.  Updating and deleting a
user requires a bearer token for that user or an administrator; the
status switch, the indicators report and the PDF export are reserved
to administrators.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response, status

from songs_api.app.api.deps import get_user_service
from songs_api.app.core.errors import internal_errors
from songs_api.app.core.security import get_current_user, require_roles
from songs_api.app.schemas.common import DeletedResponse, MessagePayload
from songs_api.app.schemas.user import (
    LoginResponse,
    UserCreate,
    UserIndicatorsResponse,
    UserListResponse,
    UserLogin,
    UserMutationPayload,
    UserMutationResponse,
    UserResponse,
    UserStatusUpdate,
    UserUpdate,
)
from songs_api.app.services.user_service import UserService

router = APIRouter()


@router.post("/create", response_model=UserMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_user(user: UserCreate, service: UserService = Depends(get_user_service)) -> UserMutationResponse:
    """Register a new user with role ``user``.

    Answers 422 when a field is invalid (blocked email providers
    included) and 409 when the email is already registered.
    """
    with internal_errors("Error al crear el usuario"):
        created = await service.create_user(user)
    return UserMutationResponse(
        payload=UserMutationPayload(message=f"Usuario {created.name} creado exitosamente", user=created)
    )


@router.post("/login", response_model=LoginResponse)
async def login(credentials: UserLogin, service: UserService = Depends(get_user_service)) -> LoginResponse:
    """Authenticate a user and return a token valid for one hour."""
    with internal_errors("Error al iniciar sesión"):
        token, user = await service.authenticate(credentials)
    return LoginResponse(message="Login exitoso", token=token, user=user)


@router.get("/all", response_model=UserListResponse)
async def get_all_users(service: UserService = Depends(get_user_service)) -> UserListResponse:
    with internal_errors("Error al obtener los usuarios"):
        users = await service.list_users()
    return UserListResponse(message="OK", payload=users)


@router.get("/user/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, service: UserService = Depends(get_user_service)) -> UserResponse:
    with internal_errors("Error al obtener el usuario"):
        user = await service.get_user(user_id)
    return UserResponse(message="OK", payload=user)


@router.get("/indicators/users", response_model=UserIndicatorsResponse)
async def get_user_indicators(
    current_user: Dict[str, Any] = Depends(require_roles("admin")),
    service: UserService = Depends(get_user_service),
) -> UserIndicatorsResponse:
    """Totals of users by status and role, and their average age."""
    with internal_errors("Error al calcular los indicadores"):
        indicators = await service.indicators()
    return UserIndicatorsResponse(payload=indicators)


@router.get(
    "/export/users",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}, "description": "Usuarios en PDF"}},
)
async def export_users(
    current_user: Dict[str, Any] = Depends(require_roles("admin")),
    service: UserService = Depends(get_user_service),
) -> Response:
    """Download every user as a PDF table; password hashes are never included."""
    with internal_errors("Error al exportar los usuarios"):
        content = await service.export_users_pdf()
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="usuarios.pdf"'},
    )


@router.patch("/update", response_model=UserMutationResponse)
async def update_user(
    user: UserUpdate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserMutationResponse:
    """Partially update the user named by ``id`` in the body."""
    with internal_errors("Error al actualizar el usuario"):
        updated = await service.update_user(user, current_user)
    return UserMutationResponse(
        payload=UserMutationPayload(message=f"Usuario {updated.name} actualizado exitosamente", user=updated)
    )


@router.patch("/status/{user_id}", response_model=UserMutationResponse)
async def update_user_status(
    user_id: str,
    body: Optional[UserStatusUpdate] = None,
    current_user: Dict[str, Any] = Depends(require_roles("admin")),
    service: UserService = Depends(get_user_service),
) -> UserMutationResponse:
    """Activate or deactivate a user; an empty body toggles the flag."""
    with internal_errors("Error al actualizar el estado del usuario"):
        updated = await service.set_status(user_id, body.is_active if body else None)
    state = "activado" if updated.is_active else "desactivado"
    return UserMutationResponse(
        payload=UserMutationPayload(message=f"Usuario {updated.name} {state} exitosamente", user=updated)
    )


@router.delete("/delete/{user_id}", response_model=DeletedResponse)
async def delete_user(
    user_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> DeletedResponse:
    """Delete a user; allowed for the user themselves or an administrator."""
    with internal_errors("Error al borrar el usuario"):
        name = await service.delete_user(user_id, current_user)
    return DeletedResponse(payload=MessagePayload(message=f"El usuario :{name} ha sido borrado con exito"))
