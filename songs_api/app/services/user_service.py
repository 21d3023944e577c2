"""
Business logic for users.

``UserService`` handles registration, login, profile updates, account
status and deletion on top of the ``UserRepository`` of the injected
database handle.  Passwords are stored as PBKDF2 hashes and never leave
the service: every public result is a ``UserRead`` or ``LoginUser``.

Login answers the same "Credenciales inválidas" for an unknown email
and a wrong password; only a deactivated account gets a distinct
message.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..core.config import Settings
from ..core.errors import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    DuplicateRecordError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from ..core.security import hash_password, sign_token, verify_password
from ..schemas.user import LoginUser, UserCreate, UserIndicators, UserLogin, UserRead, UserUpdate
from ..utils.update_model import update_model
from ..utils.validators import ValidationResult, validate, validate_email
from .user_export import render_users_pdf

logger = logging.getLogger(__name__)

MIN_AGE = 13
INVALID_DATA_MESSAGE = "Datos inválidos. Verifica los campos obligatorios."
INVALID_CREDENTIALS_MESSAGE = "Credenciales inválidas"
EMAIL_TAKEN_MESSAGE = "Email ya registrado"
ROLES = ("user", "admin")


def validate_age(value: Any) -> ValidationResult:
    """An absent age is fine; a given one must be an int of at least 13."""
    if value is None:
        return ValidationResult(True, "ok")
    if isinstance(value, bool) or not isinstance(value, int) or value < MIN_AGE:
        return ValidationResult(False, f"La edad mínima es {MIN_AGE} años")
    return ValidationResult(True, "ok")


def _failed(results: Dict[str, ValidationResult]) -> Dict[str, str]:
    return {field: result.message for field, result in results.items() if not result.valid}


class UserService:
    """User operations bound to one database handle."""

    def __init__(self, database, settings: Settings) -> None:
        self.users = database.users
        self.settings = settings

    async def list_users(self) -> List[UserRead]:
        return [UserRead.model_validate(user) for user in await self.users.get_all()]

    async def get_user(self, user_id: str) -> UserRead:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("Usuario no encontrado", key="error")
        return UserRead.model_validate(user)

    async def create_user(self, data: UserCreate) -> UserRead:
        """Register a user with the default role and an active account."""
        errors = _failed(
            {
                "name": validate(data.name),
                "lastname": validate(data.lastname),
                "email": validate_email(data.email),
                "password": validate(data.password),
                "age": validate_age(data.age),
            }
        )
        if errors:
            raise ValidationError(INVALID_DATA_MESSAGE, errors=errors)

        email = data.email.strip()
        if await self.users.get_by_email(email) is not None:
            raise ConflictError(EMAIL_TAKEN_MESSAGE)

        logger.info("Registering user %s", email)
        try:
            user = await self.users.create(
                {
                    "name": data.name,
                    "lastname": data.lastname,
                    "email": email,
                    "password": hash_password(data.password),
                    "age": data.age,
                    "role": "user",
                    "isActive": True,
                }
            )
        except DuplicateRecordError:
            raise ConflictError(EMAIL_TAKEN_MESSAGE)
        return UserRead.model_validate(user)

    async def authenticate(self, data: UserLogin) -> Tuple[str, LoginUser]:
        """Check credentials and issue a token.

        Returns
        -------
        tuple
            The signed token and the public identity of the user.
        """
        if not validate_email(data.email).valid or not validate(data.password).valid:
            raise BadRequestError("Email y contraseña son requeridos")

        email = data.email.strip()
        user = await self.users.get_by_email(email)
        if user is None:
            logger.warning("Login failed for unknown email %s", email)
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
        if not user.get("isActive", True):
            logger.warning("Login refused for inactive user %s", user["id"])
            raise AuthenticationError("Usuario inactivo")
        if not verify_password(data.password, user.get("password")):
            logger.warning("Login failed for user %s: wrong password", user["id"])
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        identity = LoginUser(
            id=user["id"],
            name=user.get("name"),
            email=user["email"],
            role=user.get("role", "user"),
        )
        token = sign_token(
            identity.model_dump(),
            self.settings.jwt_secret,
            expires_in=self.settings.access_token_expire_seconds,
        )
        logger.info("User %s logged in", user["id"])
        return token, identity

    async def update_user(self, data: UserUpdate, current_user: Dict[str, Any]) -> UserRead:
        """Apply a partial update to a user.

        Users may update themselves; administrators may update anyone and
        are the only ones allowed to change ``role``.  A new password is
        hashed before it is stored.
        """
        if not data.id:
            raise ValidationError("El id es obligatorio para actualizar el usuario")
        is_admin = current_user.get("role") == "admin"
        if not is_admin and current_user.get("id") != data.id:
            raise ForbiddenError("No tienes permisos para actualizar este usuario")

        changes = update_model({}, data.model_dump(exclude_unset=True, exclude={"id"}))
        if "role" in changes and not is_admin:
            raise ForbiddenError("Solo un administrador puede cambiar el rol")

        results = {field: validate(changes[field]) for field in ("name", "lastname", "password") if field in changes}
        if "email" in changes:
            results["email"] = validate_email(changes["email"])
        if "age" in changes:
            results["age"] = validate_age(changes["age"])
        if "role" in changes and changes["role"] not in ROLES:
            results["role"] = ValidationResult(False, "El rol no es válido")
        errors = _failed(results)
        if errors:
            raise ValidationError(INVALID_DATA_MESSAGE, errors=errors)

        user = await self.users.get_by_id(data.id)
        if user is None:
            raise NotFoundError("Usuario no encontrado")

        if "email" in changes:
            changes["email"] = changes["email"].strip()
            if changes["email"] != user["email"]:
                existing = await self.users.get_by_email(changes["email"])
                if existing is not None and existing["id"] != user["id"]:
                    raise ConflictError(EMAIL_TAKEN_MESSAGE)
        if "password" in changes:
            changes["password"] = hash_password(changes["password"])

        try:
            updated = await self.users.update(user["id"], update_model(user, changes))
        except DuplicateRecordError:
            raise ConflictError(EMAIL_TAKEN_MESSAGE)
        if updated is None:
            raise NotFoundError("Usuario no encontrado")
        logger.info("User %s updated by %s", user["id"], current_user.get("id"))
        return UserRead.model_validate(updated)

    async def set_status(self, user_id: str, is_active: Optional[bool] = None) -> UserRead:
        """Set the active flag, or toggle it when ``is_active`` is ``None``."""
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("Usuario no encontrado")
        new_status = not user.get("isActive", True) if is_active is None else is_active
        updated = await self.users.update(user["id"], {"isActive": new_status})
        if updated is None:
            raise NotFoundError("Usuario no encontrado")
        logger.info("User %s active=%s", user["id"], new_status)
        return UserRead.model_validate(updated)

    async def delete_user(self, user_id: str, current_user: Dict[str, Any]) -> str:
        """Delete a user and return their name.

        Only the user themselves or an administrator may do this.
        """
        if current_user.get("role") != "admin" and current_user.get("id") != user_id:
            raise ForbiddenError("No tienes permisos para eliminar este usuario")
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("El usuario no existe", key="error")
        await self.users.delete(user["id"])
        logger.info("User %s deleted by %s", user["id"], current_user.get("id"))
        return user.get("name") or user["email"]

    async def export_users_pdf(self) -> bytes:
        """Render every user into a PDF report."""
        users = await self.list_users()
        logger.info("Exporting %d users to PDF", len(users))
        return render_users_pdf(users)

    async def indicators(self) -> UserIndicators:
        """Aggregate counts over all users."""
        users = await self.users.get_all()
        active = sum(1 for user in users if user.get("isActive", True))
        by_role = {role: 0 for role in ROLES}
        for user in users:
            role = user.get("role", "user")
            by_role[role] = by_role.get(role, 0) + 1
        ages = [user["age"] for user in users if isinstance(user.get("age"), int)]
        return UserIndicators(
            total_users=len(users),
            active_users=active,
            inactive_users=len(users) - active,
            users_by_role=by_role,
            average_age=round(sum(ages) / len(ages), 1) if ages else None,
        )
