from typing import Optional

from fastapi import APIRouter, Depends, Query

from auth_api.core.auth import get_block_actor, get_current_auth, require_role
from auth_api.core.deps import get_user_service
from auth_api.core.responses import api_response
from auth_api.models.auth import Auth, Role
from auth_api.schemas.auth import AuthResponse
from auth_api.schemas.user import UserListResponse, UserResponse, UserUpdate, UserWithAuthResponse
from auth_api.services.user_service import UserService

router = APIRouter()


@router.get("/")
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: Auth = Depends(require_role(Role.ADMIN)),
    service: UserService = Depends(get_user_service),
):
    """Admin: paginated list of all users with their account state."""
    users, total = service.list_users(page, limit)
    listing = UserListResponse(
        users=[UserWithAuthResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        limit=limit,
    )
    return api_response("Success", listing.model_dump(mode="json"))


@router.get("/me")
def get_me(
    auth: Auth = Depends(get_current_auth),
    service: UserService = Depends(get_user_service),
):
    user = service.get_profile(auth)
    return api_response("Success", UserWithAuthResponse.model_validate(user).model_dump(mode="json"))


@router.patch("/update/{user_id}")
def update_user(
    user_id: str,
    body: UserUpdate,
    auth: Auth = Depends(get_current_auth),
    service: UserService = Depends(get_user_service),
):
    user = service.update_profile(auth, user_id, body)
    return api_response("User updated successfully", UserResponse.model_validate(user).model_dump(mode="json"))


@router.post("/block/{auth_id}")
def block_user(
    auth_id: str,
    actor: Optional[Auth] = Depends(get_block_actor),
    service: UserService = Depends(get_user_service),
):
    auth = service.set_blocked(auth_id, True)
    return api_response("User blocked", AuthResponse.model_validate(auth).model_dump(mode="json"))


@router.post("/unblock/{auth_id}")
def unblock_user(
    auth_id: str,
    actor: Optional[Auth] = Depends(get_block_actor),
    service: UserService = Depends(get_user_service),
):
    auth = service.set_blocked(auth_id, False)
    return api_response("User unblocked", AuthResponse.model_validate(auth).model_dump(mode="json"))
