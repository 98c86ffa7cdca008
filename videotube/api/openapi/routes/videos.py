"""Video listing and detail endpoints."""

from fastapi import APIRouter

from videotube.api.dependencies import CatalogServiceDep
from videotube.application.dtos.catalog import VideoDetailResponse, VideoListResponse

router = APIRouter()


@router.get(
    "/videos",
    response_model=VideoListResponse,
    summary="List videos",
    description="All stored videos, newest first, with thumbnail URLs.",
)
async def list_videos(catalog: CatalogServiceDep) -> VideoListResponse:
    return VideoListResponse(videos=await catalog.list_videos())


@router.get(
    "/videos/{video_id}",
    response_model=VideoDetailResponse,
    summary="Get video",
    description="One video by its video ID. Each call counts one view.",
    responses={404: {"description": "Video not found"}},
)
async def get_video(video_id: str, catalog: CatalogServiceDep) -> VideoDetailResponse:
    """Return the video and increment its view count."""
    return VideoDetailResponse(video=await catalog.view_video(video_id))
