from fastapi import APIRouter

from app.api.realtime.socket_server import get_dispatcher
from app.api.v1.schemas.base import ApiOut
from app.api.v1.schemas.realtime import StreamOut
from app.domain.realtime.hub import ReadSnapshot

router = APIRouter(prefix="/live")


@router.get("/list_streams")
async def list_streams() -> ApiOut[list[StreamOut]]:
    """Live streams as of now, same entries as the `streams-updated` event."""
    summaries = await get_dispatcher().submit(ReadSnapshot(kind="streams"))

    return ApiOut[list[StreamOut]](
        results=[StreamOut.model_validate(summary.model_dump()) for summary in summaries]
    )
