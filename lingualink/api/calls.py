"""
Call history endpoints.
"""

import math

from fastapi import APIRouter, Depends

from lingualink.api.deps import get_current_user, get_storage
from lingualink.errors import InvalidRequest, NotFoundError, PermissionDenied
from lingualink.models import User
from lingualink.schemas import CreateCallRequest, EndCallRequest
from lingualink.storage import Storage

router = APIRouter(prefix="/api", tags=["calls"])


@router.get("/users/{user_id}/calls")
async def list_calls(
    user_id: int,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    if current_user.id != user_id:
        raise PermissionDenied()
    return await storage.get_calls(user_id)


@router.post("/calls", status_code=201)
async def create_call(
    request: CreateCallRequest,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    if current_user.id != request.initiator_id:
        raise PermissionDenied()

    call = await storage.create_call(request.model_dump())
    return call.to_dict()


@router.patch("/calls/{call_id}/end")
async def end_call(
    call_id: int,
    request: EndCallRequest,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    duration = request.duration
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        raise InvalidRequest("Invalid duration")
    if not math.isfinite(duration) or duration < 0:
        raise InvalidRequest("Invalid duration")
    duration = int(duration)

    call = await storage.get_call(call_id)
    if call is None:
        raise NotFoundError("Call not found")
    if current_user.id not in (call.initiator_id, call.receiver_id):
        raise PermissionDenied()

    call = await storage.end_call(call_id, duration)
    return call.to_dict()
