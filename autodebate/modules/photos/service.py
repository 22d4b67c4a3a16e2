import json
import logging
import time
from supabase import Client
from autodebate.config import settings
from autodebate.core.access import resolve_visibility
from autodebate.core.filters import (
    PhotoSearchFilters, filter_photos, available_makes, available_models, available_tags
)
from autodebate.core.storage import (
    BucketStorage, build_storage_path, cleanup, get_originals_storage, is_image_file, make_thumbnail
)
from autodebate.modules.gamification.service import GamificationService
from autodebate.modules.photos.schemas import (
    PhotoUpdate, PhotoResponse, ThumbnailToggleResponse, ReactionResponse, DownloadResponse, SearchFacets
)
from typing import List, Optional, Dict, Any, Tuple
from datetime import datetime, timezone
from fastapi import HTTPException, UploadFile

logger = logging.getLogger(__name__)

REACTION_TABLES = {
    "like": ("photo_likes", "likes_count"),
    "favorite": ("photo_favorites", "favorites_count"),
}


def parse_tags(raw: Optional[str]) -> List[str]:
    """Comma separated form field -> unique, trimmed tags in input order"""
    tags: List[str] = []
    for tag in (raw or "").split(","):
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def parse_specs(raw: Optional[str]) -> Dict[str, str]:
    if not raw:
        return {}
    try:
        specs = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="specs must be a JSON object")
    if not isinstance(specs, dict):
        raise HTTPException(status_code=400, detail="specs must be a JSON object")
    return {str(k): str(v) for k, v in specs.items()}


class PhotoService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.gallery = get_originals_storage(supabase, settings.gallery_bucket)
        self.thumbs = BucketStorage(supabase, settings.thumbs_bucket)

    def to_response(self, row: Dict[str, Any], **extra) -> PhotoResponse:
        data = {**row, **extra}
        data["tags"] = row.get("tags") or []
        data["specs"] = row.get("specs") or {}
        data["likes_count"] = row.get("likes_count") or 0
        data["favorites_count"] = row.get("favorites_count") or 0
        data["thumbnail_url"] = self.thumbs.public_url(row.get("thumbnail_path"))
        return PhotoResponse(**{k: v for k, v in data.items() if k in PhotoResponse.model_fields})

    def get_photo_row(self, photo_id: str) -> Dict[str, Any]:
        result = self.supabase.table("photos")\
            .select("*")\
            .eq("id", photo_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Photo not found")
        return result.data

    def ensure_visible(self, photo: Dict[str, Any], viewer_id: Optional[str]) -> Dict[str, Any]:
        """Car photos follow the uploader's show_cars flag; a hidden one reads as missing"""
        if not photo.get("user_car_id"):
            return photo
        uploader = self.supabase.table("profiles")\
            .select("id, privacy_settings")\
            .eq("id", photo["uploaded_by"])\
            .maybe_single()\
            .execute()
        if uploader and uploader.data and not resolve_visibility(uploader.data, viewer_id).cars:
            raise HTTPException(status_code=404, detail="Photo not found")
        return photo

    def get_photo(self, photo_id: str, viewer_id: Optional[str]) -> PhotoResponse:
        try:
            return self.to_response(self.ensure_visible(self.get_photo_row(photo_id), viewer_id))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_event_photos(self, event_id: str) -> List[PhotoResponse]:
        try:
            result = self.supabase.table("photos")\
                .select("*")\
                .eq("event_id", event_id)\
                .order("created_at", desc=False)\
                .execute()
            return [self.to_response(p) for p in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_car_photos(self, car: Dict[str, Any], viewer_id: Optional[str]) -> List[PhotoResponse]:
        try:
            owner = self.supabase.table("profiles")\
                .select("id, privacy_settings")\
                .eq("id", car["user_id"])\
                .maybe_single()\
                .execute()
            if owner and owner.data and not resolve_visibility(owner.data, viewer_id).cars:
                return []
            result = self.supabase.table("photos")\
                .select("*")\
                .eq("user_car_id", car["id"])\
                .order("created_at", desc=False)\
                .execute()
            return [self.to_response(p, user_car=car) for p in result.data]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _showroom_rows(self, viewer_id: Optional[str]) -> List[Dict[str, Any]]:
        """Car photos whose uploader shows cars to this viewer, with car and uploader attached"""
        photos = self.supabase.table("photos")\
            .select("*")\
            .not_.is_("user_car_id", "null")\
            .order("created_at", desc=True)\
            .execute().data or []
        if not photos:
            return []

        uploader_ids = list({p["uploaded_by"] for p in photos})
        uploaders = self.supabase.table("profiles")\
            .select("id, username, avatar_url, level, privacy_settings")\
            .in_("id", uploader_ids)\
            .execute().data or []
        uploaders_by_id = {u["id"]: u for u in uploaders}

        car_ids = list({p["user_car_id"] for p in photos})
        cars = self.supabase.table("user_cars")\
            .select("id, make, model, year, description")\
            .in_("id", car_ids)\
            .execute().data or []
        cars_by_id = {c["id"]: c for c in cars}

        rows = []
        for photo in photos:
            uploader = uploaders_by_id.get(photo["uploaded_by"], {"id": photo["uploaded_by"]})
            if not resolve_visibility(uploader, viewer_id).cars:
                continue
            rows.append({
                **photo,
                "user_car": cars_by_id.get(photo["user_car_id"]),
                "uploader": {k: uploader.get(k) for k in ("id", "username", "avatar_url", "level")},
            })
        return rows

    def search_photos(self, filters: PhotoSearchFilters, viewer_id: Optional[str], event_id: Optional[str] = None) -> List[PhotoResponse]:
        """Showroom (or one event's gallery) narrowed by the search panel filters"""
        try:
            if event_id:
                rows = self.supabase.table("photos")\
                    .select("*")\
                    .eq("event_id", event_id)\
                    .order("created_at", desc=False)\
                    .execute().data or []
            else:
                rows = self._showroom_rows(viewer_id)
            if filters.is_active():
                rows = filter_photos(rows, filters)
            return [self.to_response(r) for r in rows]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def search_facets(self, make: Optional[str] = None) -> SearchFacets:
        try:
            cars = self.supabase.table("user_cars").select("make, model, year").execute().data or []
            photos = self.supabase.table("photos").select("tags").execute().data or []
            return SearchFacets(
                makes=available_makes(cars),
                models=available_models(cars, make) if make else [],
                tags=available_tags(photos),
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def count_car_photos(self, car_id: str) -> int:
        result = self.supabase.table("photos")\
            .select("id", count="exact")\
            .eq("user_car_id", car_id)\
            .execute()
        return result.count or 0

    async def upload_photos(
        self,
        user_id: str,
        files: List[UploadFile],
        event_id: Optional[str] = None,
        car_id: Optional[str] = None,
        caption: Optional[str] = None,
        tags: Optional[List[str]] = None,
        specs: Optional[Dict[str, str]] = None
    ) -> List[PhotoResponse]:
        """Store each file as original + thumbnail + photos row. The batch is all or nothing."""
        if not files:
            raise HTTPException(status_code=400, detail="No files provided")
        if not event_id and not car_id:
            raise HTTPException(status_code=400, detail="A photo belongs to an event or a car")
        for file in files:
            if not is_image_file(file.filename):
                raise HTTPException(status_code=400, detail=f"Not an image: {file.filename}")
        if car_id:
            existing = self.count_car_photos(car_id)
            if existing + len(files) > settings.max_car_photos:
                raise HTTPException(
                    status_code=409,
                    detail=f"Maximum {settings.max_car_photos} photos per car ({existing} already uploaded)"
                )

        # every file must decode before anything is written
        prepared = []
        for file in files:
            content = await file.read()
            thumb_content, thumb_type = make_thumbnail(content)
            prepared.append((file.filename, content, file.content_type or "image/jpeg", thumb_content, thumb_type))

        scope_id = event_id or car_id
        fields = {
            "event_id": event_id,
            "user_car_id": car_id,
            "caption": caption or None,
            "tags": tags or [],
            "specs": specs or {},
        }
        uploaded: List[Tuple[object, str]] = []
        rows: List[Dict[str, Any]] = []
        try:
            for filename, content, content_type, thumb_content, thumb_type in prepared:
                rows.append(self._store_one(
                    user_id, scope_id, filename, content, content_type, thumb_content, thumb_type, fields, uploaded
                ))
        except HTTPException:
            self._discard_batch(rows, uploaded)
            raise
        except Exception as e:
            logger.error(f"Photo batch upload failed after {len(rows)} of {len(prepared)} files: {e}")
            self._discard_batch(rows, uploaded)
            raise HTTPException(status_code=500, detail=f"Failed to upload photo: {str(e)}")

        gamification = GamificationService(self.supabase)
        for row in rows:
            gamification.award_points_quietly(user_id, "photo_upload", related_id=row["id"], related_type="photo")
        return [self.to_response(row) for row in rows]

    def _store_one(
        self,
        user_id: str,
        scope_id: str,
        filename: str,
        content: bytes,
        content_type: str,
        thumb_content: bytes,
        thumb_type: str,
        fields: Dict[str, Any],
        uploaded: List[Tuple[object, str]]
    ) -> Dict[str, Any]:
        """Original, then thumbnail, then the photos row; written objects are appended to uploaded"""
        path = build_storage_path(user_id, scope_id, filename, int(time.time() * 1000))
        self.gallery.upload(path, content, content_type)
        uploaded.append((self.gallery, path))
        self.thumbs.upload(path, thumb_content, thumb_type)
        uploaded.append((self.thumbs, path))

        result = self.supabase.table("photos").insert({
            **fields,
            "storage_path": path,
            "thumbnail_path": path,
            "uploaded_by": user_id,
            "likes_count": 0,
            "favorites_count": 0,
            "is_thumbnail": False
        }).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to save photo")
        logger.info(f"Stored photo {result.data[0]['id']} at {path}")
        return result.data[0]

    def _discard_batch(self, rows: List[Dict[str, Any]], uploaded: List[Tuple[object, str]]) -> None:
        """Undo a partially stored batch: rows first, then storage objects"""
        if rows:
            try:
                self.supabase.table("photos")\
                    .delete()\
                    .in_("id", [row["id"] for row in rows])\
                    .execute()
            except Exception as e:
                logger.warning(f"Could not remove photo rows {[row['id'] for row in rows]}: {e}")
        cleanup(uploaded)

    def update_photo(self, photo_id: str, photo_data: PhotoUpdate) -> PhotoResponse:
        try:
            update_data: Dict[str, Any] = {"updated_at": datetime.now(timezone.utc).isoformat()}
            if photo_data.caption is not None:
                update_data["caption"] = photo_data.caption.strip() or None
            if photo_data.tags is not None:
                update_data["tags"] = parse_tags(",".join(photo_data.tags))
            if photo_data.specs is not None:
                update_data["specs"] = photo_data.specs

            result = self.supabase.table("photos")\
                .update(update_data)\
                .eq("id", photo_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Photo not found")
            return self.to_response(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_photo(self, photo: Dict[str, Any]) -> bool:
        """Delete the row, then both storage objects"""
        try:
            result = self.supabase.table("photos")\
                .delete()\
                .eq("id", photo["id"])\
                .execute()
            self.gallery.remove([photo["storage_path"]])
            if photo.get("thumbnail_path"):
                self.thumbs.remove([photo["thumbnail_path"]])
            logger.info(f"Deleted photo {photo['id']}")
            return len(result.data) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _thumbnail_scope(self, photo: Dict[str, Any]) -> Tuple[str, str]:
        if photo.get("event_id"):
            return "event_id", photo["event_id"]
        if photo.get("user_car_id"):
            return "user_car_id", photo["user_car_id"]
        raise HTTPException(status_code=400, detail="Photo has no event or car")

    def count_thumbnails(self, column: str, value: str) -> int:
        result = self.supabase.table("photos")\
            .select("id", count="exact")\
            .eq(column, value)\
            .eq("is_thumbnail", True)\
            .execute()
        return result.count or 0

    def _set_thumbnail(self, photo_id: str, value: bool) -> List[Dict[str, Any]]:
        return self.supabase.table("photos")\
            .update({"is_thumbnail": value})\
            .eq("id", photo_id)\
            .eq("is_thumbnail", not value)\
            .execute().data or []

    def toggle_thumbnail(self, photo: Dict[str, Any]) -> ThumbnailToggleResponse:
        """Flip is_thumbnail. Turning it on is capped per event (or car) at max_event_thumbnails.

        The cap is checked before the write and verified after it: if a
        concurrent writer pushed the count over the cap, this write is undone.
        """
        cap = settings.max_event_thumbnails
        column, value = self._thumbnail_scope(photo)
        try:
            if photo.get("is_thumbnail"):
                self._set_thumbnail(photo["id"], False)
                return ThumbnailToggleResponse(
                    photo=self.to_response(self.get_photo_row(photo["id"])),
                    thumbnail_count=self.count_thumbnails(column, value),
                    max_thumbnails=cap
                )

            if self.count_thumbnails(column, value) >= cap:
                raise HTTPException(status_code=409, detail=f"Maximum {cap} thumbnails per event")

            changed = self._set_thumbnail(photo["id"], True)
            count = self.count_thumbnails(column, value)
            if changed and count > cap:
                self._set_thumbnail(photo["id"], False)
                logger.info(f"Reverted thumbnail on {photo['id']}: concurrent selection exceeded cap")
                raise HTTPException(status_code=409, detail=f"Maximum {cap} thumbnails per event")

            return ThumbnailToggleResponse(
                photo=self.to_response(self.get_photo_row(photo["id"])),
                thumbnail_count=count,
                max_thumbnails=cap
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def toggle_reaction(self, photo_id: str, user_id: str, kind: str) -> ReactionResponse:
        """Like/favorite toggle through the join table; the counter is recomputed from it"""
        table, counter = REACTION_TABLES[kind]
        try:
            self.ensure_visible(self.get_photo_row(photo_id), user_id)
            existing = self.supabase.table(table)\
                .select("id")\
                .eq("photo_id", photo_id)\
                .eq("user_id", user_id)\
                .execute()
            if existing.data:
                self.supabase.table(table)\
                    .delete()\
                    .eq("photo_id", photo_id)\
                    .eq("user_id", user_id)\
                    .execute()
                active = False
            else:
                self.supabase.table(table).insert({
                    "photo_id": photo_id,
                    "user_id": user_id
                }).execute()
                active = True

            count = self.supabase.table(table)\
                .select("id", count="exact")\
                .eq("photo_id", photo_id)\
                .execute().count or 0
            self.supabase.table("photos")\
                .update({counter: count})\
                .eq("id", photo_id)\
                .execute()
            return ReactionResponse(photo_id=photo_id, active=active, count=count)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def download_url(self, photo: Dict[str, Any]) -> DownloadResponse:
        ttl = settings.signed_url_ttl_seconds
        try:
            url = self.gallery.signed_url(photo["storage_path"], ttl)
            return DownloadResponse(photo_id=photo["id"], url=url, expires_in=ttl)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Could not create download URL: {str(e)}")

    def download_all(self, event_id: str) -> List[DownloadResponse]:
        """Signed URLs for every photo of an event; photos that fail are skipped"""
        urls = []
        for photo in self.list_event_photos(event_id):
            try:
                urls.append(self.download_url(photo.model_dump()))
            except HTTPException as e:
                logger.warning(f"Skipping download of {photo.id}: {e.detail}")
        return urls
