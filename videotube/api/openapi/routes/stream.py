"""Range streaming and media redirect endpoints."""

from typing import Annotated

from fastapi import APIRouter, Header
from fastapi.responses import RedirectResponse, StreamingResponse
from starlette.responses import Response

from videotube.api.dependencies import CatalogServiceDep, StreamResponderDep
from videotube.application.services.streaming import StreamReply

router = APIRouter()


def _to_response(reply: StreamReply) -> Response:
    if reply.redirect_url is not None:
        return RedirectResponse(reply.redirect_url, status_code=reply.status_code)
    return StreamingResponse(
        reply.body,
        status_code=reply.status_code,
        media_type=reply.media_type,
        headers=reply.headers,
    )


@router.get(
    "/stream/{video_id}",
    summary="Stream video",
    description=(
        "Serve the video with HTTP range support: 200 for the whole object, "
        "206 for one byte window, 416 for an unsatisfiable Range header. "
        "With signed delivery the client is redirected to a presigned URL."
    ),
    response_class=StreamingResponse,
    responses={
        206: {"description": "Partial content"},
        307: {"description": "Redirect to presigned URL"},
        404: {"description": "Video not found"},
        416: {"description": "Range not satisfiable"},
    },
)
async def stream_video(
    video_id: str,
    catalog: CatalogServiceDep,
    responder: StreamResponderDep,
    range_header: Annotated[str | None, Header(alias="Range")] = None,
) -> Response:
    asset = await catalog.get_asset(video_id)
    return _to_response(await responder.respond(asset.video_key, range_header))


@router.get(
    "/media/{key:path}",
    summary="Media redirect",
    description="Redirect to a URL the client can fetch the object from.",
    response_class=RedirectResponse,
    status_code=307,
    responses={404: {"description": "Object not found"}},
)
async def media_redirect(key: str, responder: StreamResponderDep) -> Response:
    return _to_response(await responder.redirect(key))
