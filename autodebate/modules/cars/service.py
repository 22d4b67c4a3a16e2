from supabase import Client
from autodebate.core.access import resolve_visibility
from autodebate.modules.cars.schemas import (
    CarCreate, CarUpdate, CarResponse, FavoriteCarCreate, FavoriteCarResponse
)
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
from fastapi import HTTPException


class CarService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_car_row(self, car_id: str) -> Dict[str, Any]:
        result = self.supabase.table("user_cars")\
            .select("*")\
            .eq("id", car_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Car not found")
        return result.data

    def _cars_visible(self, user_id: str, viewer_id: Optional[str]) -> bool:
        profile = self.supabase.table("profiles")\
            .select("id, privacy_settings")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        if not profile or not profile.data:
            raise HTTPException(status_code=404, detail="Profile not found")
        return resolve_visibility(profile.data, viewer_id).cars

    def list_cars(self, user_id: str, viewer_id: Optional[str], current_only: bool = False) -> List[CarResponse]:
        """Garage of a user; empty when the owner hides cars from this viewer"""
        try:
            if not self._cars_visible(user_id, viewer_id):
                return []
            query = self.supabase.table("user_cars").select("*").eq("user_id", user_id)
            if current_only:
                query = query.eq("is_current", True)
            result = query.order("created_at", desc=True).execute()
            return [CarResponse(**car) for car in result.data]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_car(self, user_id: str, car_data: CarCreate) -> CarResponse:
        try:
            result = self.supabase.table("user_cars").insert({
                "user_id": user_id,
                "make": car_data.make.strip(),
                "model": car_data.model.strip(),
                "year": car_data.year,
                "description": car_data.description,
                "is_current": car_data.is_current
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create car")

            return CarResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_car(self, car_id: str, car_data: CarUpdate) -> CarResponse:
        try:
            update_data = car_data.model_dump(exclude_none=True)
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

            result = self.supabase.table("user_cars")\
                .update(update_data)\
                .eq("id", car_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Car not found")

            return CarResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_car(self, car_id: str) -> bool:
        try:
            result = self.supabase.table("user_cars")\
                .delete()\
                .eq("id", car_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_favorite_cars(self, user_id: str, viewer_id: Optional[str]) -> List[FavoriteCarResponse]:
        try:
            if not self._cars_visible(user_id, viewer_id):
                return []
            result = self.supabase.table("user_favorite_cars")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            return [FavoriteCarResponse(**car) for car in result.data]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_favorite_car(self, user_id: str, car_data: FavoriteCarCreate) -> FavoriteCarResponse:
        try:
            result = self.supabase.table("user_favorite_cars").insert({
                "user_id": user_id,
                "make": car_data.make.strip(),
                "model": car_data.model.strip(),
                "year": car_data.year
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add favorite car")

            return FavoriteCarResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_favorite_owner(self, favorite_id: str) -> str:
        result = self.supabase.table("user_favorite_cars")\
            .select("user_id")\
            .eq("id", favorite_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Favorite car not found")
        return result.data["user_id"]

    def delete_favorite_car(self, favorite_id: str) -> bool:
        try:
            result = self.supabase.table("user_favorite_cars")\
                .delete()\
                .eq("id", favorite_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
