"""Staff-only routes (Manager or Admin role claim)."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kodbank.api.gate import require_roles
from kodbank.core.database import get_db
from kodbank.models import Role
from kodbank.schemas.auth import CurrentUser, UserListItem, UsersListResponse
from kodbank.services.credentials import CredentialStore

router = APIRouter()


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _staff: Annotated[CurrentUser, Depends(require_roles(Role.MANAGER, Role.ADMIN))],
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all accounts without balances or password hashes."""
    users = CredentialStore(db).list_users()
    return UsersListResponse(users=[UserListItem.model_validate(u) for u in users])
