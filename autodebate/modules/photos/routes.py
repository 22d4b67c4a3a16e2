from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form
from autodebate.database.supabase_client import get_supabase
from autodebate.core.dependencies import get_viewer, get_optional_viewer, require_capability, ensure_can_edit
from autodebate.core.filters import PhotoSearchFilters
from autodebate.modules.events.service import EventService
from autodebate.modules.photos.schemas import (
    PhotoUpdate, PhotoResponse, ThumbnailToggleResponse, ReactionResponse, DownloadResponse, SearchFacets
)
from autodebate.modules.photos.service import PhotoService, parse_tags, parse_specs
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/photos", tags=["photos"])


def get_photo_service(supabase: Client = Depends(get_supabase)) -> PhotoService:
    return PhotoService(supabase)


def search_filters(
    query: str = "",
    make: str = "",
    model: str = "",
    year: str = "",
    tags: str = "",
    has_likes: bool = False,
    has_favorites: bool = False
) -> PhotoSearchFilters:
    """Query-string search panel -> PhotoSearchFilters (tags comma separated)"""
    return PhotoSearchFilters(
        query=query, make=make, model=model, year=year,
        tags=parse_tags(tags), has_likes=has_likes, has_favorites=has_favorites
    )


@router.get("/showroom", response_model=List[PhotoResponse])
async def list_showroom(
    filters: PhotoSearchFilters = Depends(search_filters),
    viewer: Dict = Depends(get_optional_viewer),
    service: PhotoService = Depends(get_photo_service)
):
    """Car photos of users who show their garage, narrowed by the search panel"""
    return service.search_photos(filters, viewer["id"])


@router.get("/search", response_model=List[PhotoResponse])
async def search_photos(
    event_id: Optional[str] = None,
    filters: PhotoSearchFilters = Depends(search_filters),
    viewer: Dict = Depends(get_optional_viewer),
    service: PhotoService = Depends(get_photo_service)
):
    return service.search_photos(filters, viewer["id"], event_id=event_id)


@router.get("/facets", response_model=SearchFacets)
async def search_facets(
    make: Optional[str] = None,
    service: PhotoService = Depends(get_photo_service)
):
    return service.search_facets(make)


@router.get("/events/{event_id}", response_model=List[PhotoResponse])
async def list_event_photos(
    event_id: str,
    service: PhotoService = Depends(get_photo_service)
):
    return service.list_event_photos(event_id)


@router.post("/events/{event_id}", response_model=List[PhotoResponse], status_code=201)
async def upload_event_photos(
    event_id: str,
    files: List[UploadFile] = File(...),
    caption: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    specs: Optional[str] = Form(None),
    viewer: Dict = Depends(require_capability("photos:upload")),
    service: PhotoService = Depends(get_photo_service),
    supabase: Client = Depends(get_supabase)
):
    """
    Upload one or more photos to an event gallery (copiloto or admin).
    Each file is stored as original plus thumbnail; tags are comma separated
    and specs is a JSON object of strings.
    """
    EventService(supabase).get_event_row(event_id)
    return await service.upload_photos(
        viewer["id"], files, event_id=event_id,
        caption=caption, tags=parse_tags(tags), specs=parse_specs(specs)
    )


@router.get("/events/{event_id}/download-all", response_model=List[DownloadResponse])
async def download_all(
    event_id: str,
    viewer: Dict = Depends(require_capability("photos:download")),
    service: PhotoService = Depends(get_photo_service)
):
    """Signed URLs for every original in the event gallery"""
    return service.download_all(event_id)


@router.get("/{photo_id}", response_model=PhotoResponse)
async def get_photo(
    photo_id: str,
    viewer: Dict = Depends(get_optional_viewer),
    service: PhotoService = Depends(get_photo_service)
):
    return service.get_photo(photo_id, viewer["id"])


@router.put("/{photo_id}", response_model=PhotoResponse)
async def update_photo(
    photo_id: str,
    photo_data: PhotoUpdate,
    viewer: Dict = Depends(get_viewer),
    service: PhotoService = Depends(get_photo_service)
):
    """Edit caption, tags or specs (uploader or admin)"""
    photo = service.get_photo_row(photo_id)
    ensure_can_edit(viewer, photo["uploaded_by"], "photo")
    return service.update_photo(photo_id, photo_data)


@router.delete("/{photo_id}", status_code=204)
async def delete_photo(
    photo_id: str,
    viewer: Dict = Depends(get_viewer),
    service: PhotoService = Depends(get_photo_service)
):
    photo = service.get_photo_row(photo_id)
    if not viewer["access"].can_delete(photo["uploaded_by"]):
        raise HTTPException(status_code=403, detail="Only the uploader or an admin can delete this photo")
    if not service.delete_photo(photo):
        raise HTTPException(status_code=404, detail="Photo not found")


@router.post("/{photo_id}/thumbnail", response_model=ThumbnailToggleResponse)
async def toggle_thumbnail(
    photo_id: str,
    viewer: Dict = Depends(get_viewer),
    service: PhotoService = Depends(get_photo_service)
):
    """Feature or unfeature a photo; 409 once the event already has its maximum"""
    photo = service.get_photo_row(photo_id)
    ensure_can_edit(viewer, photo["uploaded_by"], "photo")
    return service.toggle_thumbnail(photo)


@router.post("/{photo_id}/like", response_model=ReactionResponse)
async def toggle_like(
    photo_id: str,
    viewer: Dict = Depends(get_viewer),
    service: PhotoService = Depends(get_photo_service)
):
    return service.toggle_reaction(photo_id, viewer["id"], "like")


@router.post("/{photo_id}/favorite", response_model=ReactionResponse)
async def toggle_favorite(
    photo_id: str,
    viewer: Dict = Depends(get_viewer),
    service: PhotoService = Depends(get_photo_service)
):
    return service.toggle_reaction(photo_id, viewer["id"], "favorite")


@router.get("/{photo_id}/download", response_model=DownloadResponse)
async def download_photo(
    photo_id: str,
    viewer: Dict = Depends(require_capability("photos:download")),
    service: PhotoService = Depends(get_photo_service)
):
    """Short-lived signed URL for the original"""
    return service.download_url(service.ensure_visible(service.get_photo_row(photo_id), viewer["id"]))
