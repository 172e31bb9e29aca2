from fastapi import APIRouter

from app.api.realtime.socket_server import get_dispatcher
from app.api.v1.schemas.base import ApiOut
from app.api.v1.schemas.realtime import OnlineUsersOut
from app.domain.realtime.hub import ReadSnapshot

router = APIRouter(prefix="/presence")


@router.get("/online")
async def get_online_users() -> ApiOut[OnlineUsersOut]:
    snapshot = await get_dispatcher().submit(ReadSnapshot(kind="presence"))

    return ApiOut[OnlineUsersOut](results=OnlineUsersOut(count=snapshot.count, user_ids=snapshot.user_ids))
