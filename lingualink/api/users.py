"""
User, login and user-language endpoints.
"""

from fastapi import APIRouter, Depends, Response

from lingualink.api.deps import get_current_user, get_storage
from lingualink.errors import AuthenticationError, ConflictError, InvalidRequest, NotFoundError, PermissionDenied
from lingualink.models import User
from lingualink.schemas import (
    CreateUserRequest,
    LoginRequest,
    UpdateUserLanguageRequest,
    UpdateUserRequest,
    UserLanguageRequest,
)
from lingualink.storage import Storage

router = APIRouter(prefix="/api", tags=["users"])


@router.post("/users", status_code=201)
async def create_user(request: CreateUserRequest, storage: Storage = Depends(get_storage)):
    if await storage.get_user_by_username(request.username):
        raise ConflictError("Username already taken")
    if await storage.get_user_by_email(request.email):
        raise ConflictError("Email already in use")

    user = await storage.create_user(request.model_dump())
    return user.to_dict()


@router.get("/users/{user_id}")
async def get_user(user_id: int, storage: Storage = Depends(get_storage)):
    user = await storage.get_user_with_languages(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.patch("/users/{user_id}")
async def update_user(
    user_id: int,
    request: UpdateUserRequest,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    if await storage.get_user(user_id) is None:
        raise NotFoundError("User not found")
    if current_user.id != user_id:
        raise PermissionDenied()

    changes = request.model_dump(exclude_unset=True)
    if "username" in changes and changes["username"] != current_user.username:
        if await storage.get_user_by_username(changes["username"]):
            raise ConflictError("Username already taken")
    if "email" in changes and changes["email"] != current_user.email:
        if await storage.get_user_by_email(changes["email"]):
            raise ConflictError("Email already in use")

    user = await storage.update_user(user_id, changes)
    return user.to_dict()


@router.post("/auth/login")
async def login(request: LoginRequest, storage: Storage = Depends(get_storage)):
    if not request.username or not request.password:
        raise InvalidRequest("Username and password are required")

    user = await storage.get_user_by_username(request.username)
    if user is None or user.password != request.password:
        raise AuthenticationError("Invalid credentials")

    return user.to_dict()


@router.get("/users/{user_id}/languages")
async def list_user_languages(user_id: int, storage: Storage = Depends(get_storage)):
    languages = await storage.get_user_languages(user_id)
    return [language.to_dict() for language in languages]


@router.post("/users/{user_id}/languages", status_code=201)
async def add_user_language(
    user_id: int,
    request: UserLanguageRequest,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    if current_user.id != user_id:
        raise PermissionDenied()

    existing = await storage.get_user_languages(user_id)
    if any(language.language == request.language for language in existing):
        raise ConflictError("Language already added for user")

    language = await storage.add_user_language({"user_id": user_id, **request.model_dump()})
    return language.to_dict()


@router.patch("/user-languages/{language_id}")
async def update_user_language(
    language_id: int,
    request: UpdateUserLanguageRequest,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    language = await storage.get_user_language(language_id)
    if language is None:
        raise NotFoundError("Language not found")
    if language.user_id != current_user.id:
        raise PermissionDenied()

    updated = await storage.update_user_language(language_id, request.model_dump(exclude_unset=True))
    return updated.to_dict()


@router.delete("/user-languages/{language_id}", status_code=204)
async def delete_user_language(
    language_id: int,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    language = await storage.get_user_language(language_id)
    if language is None:
        raise NotFoundError("Language not found")
    if language.user_id != current_user.id:
        raise PermissionDenied()

    await storage.delete_user_language(language_id)
    return Response(status_code=204)
