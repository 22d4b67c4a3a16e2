from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form
from autodebate.database.supabase_client import get_supabase
from autodebate.core.dependencies import get_viewer, get_optional_viewer, ensure_can_edit
from autodebate.modules.cars.schemas import (
    CarCreate, CarUpdate, CarResponse, FavoriteCarCreate, FavoriteCarResponse
)
from autodebate.modules.cars.service import CarService
from autodebate.modules.photos.schemas import PhotoResponse
from autodebate.modules.photos.service import PhotoService, parse_tags, parse_specs
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/cars", tags=["cars"])


def get_car_service(supabase: Client = Depends(get_supabase)) -> CarService:
    return CarService(supabase)


def get_photo_service(supabase: Client = Depends(get_supabase)) -> PhotoService:
    return PhotoService(supabase)


@router.get("/users/{user_id}", response_model=List[CarResponse])
async def list_user_cars(
    user_id: str,
    current_only: bool = False,
    viewer: Dict = Depends(get_optional_viewer),
    service: CarService = Depends(get_car_service)
):
    """A user's garage; empty when the owner hides it"""
    return service.list_cars(user_id, viewer["id"], current_only=current_only)


@router.get("/users/{user_id}/favorites", response_model=List[FavoriteCarResponse])
async def list_favorite_cars(
    user_id: str,
    viewer: Dict = Depends(get_optional_viewer),
    service: CarService = Depends(get_car_service)
):
    return service.list_favorite_cars(user_id, viewer["id"])


@router.post("", response_model=CarResponse, status_code=201)
async def create_car(
    car_data: CarCreate,
    viewer: Dict = Depends(get_viewer),
    service: CarService = Depends(get_car_service)
):
    """Add a car to the caller's garage"""
    return service.create_car(viewer["id"], car_data)


@router.post("/favorites", response_model=FavoriteCarResponse, status_code=201)
async def add_favorite_car(
    car_data: FavoriteCarCreate,
    viewer: Dict = Depends(get_viewer),
    service: CarService = Depends(get_car_service)
):
    return service.add_favorite_car(viewer["id"], car_data)


@router.delete("/favorites/{favorite_id}", status_code=204)
async def delete_favorite_car(
    favorite_id: str,
    viewer: Dict = Depends(get_viewer),
    service: CarService = Depends(get_car_service)
):
    ensure_can_edit(viewer, service.get_favorite_owner(favorite_id), "favorite car")
    if not service.delete_favorite_car(favorite_id):
        raise HTTPException(status_code=404, detail="Favorite car not found")


@router.put("/{car_id}", response_model=CarResponse)
async def update_car(
    car_id: str,
    car_data: CarUpdate,
    viewer: Dict = Depends(get_viewer),
    service: CarService = Depends(get_car_service)
):
    car = service.get_car_row(car_id)
    ensure_can_edit(viewer, car["user_id"], "car")
    return service.update_car(car_id, car_data)


@router.delete("/{car_id}", status_code=204)
async def delete_car(
    car_id: str,
    viewer: Dict = Depends(get_viewer),
    service: CarService = Depends(get_car_service)
):
    car = service.get_car_row(car_id)
    ensure_can_edit(viewer, car["user_id"], "car")
    if not service.delete_car(car_id):
        raise HTTPException(status_code=404, detail="Car not found")


@router.get("/{car_id}/photos", response_model=List[PhotoResponse])
async def list_car_photos(
    car_id: str,
    viewer: Dict = Depends(get_optional_viewer),
    service: CarService = Depends(get_car_service),
    photo_service: PhotoService = Depends(get_photo_service)
):
    return photo_service.list_car_photos(service.get_car_row(car_id), viewer["id"])


@router.post("/{car_id}/photos", response_model=List[PhotoResponse], status_code=201)
async def upload_car_photos(
    car_id: str,
    files: List[UploadFile] = File(...),
    caption: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    specs: Optional[str] = Form(None),
    viewer: Dict = Depends(get_viewer),
    service: CarService = Depends(get_car_service),
    photo_service: PhotoService = Depends(get_photo_service)
):
    """Upload photos of one of the caller's cars (limited per car)"""
    car = service.get_car_row(car_id)
    ensure_can_edit(viewer, car["user_id"], "car")
    return await photo_service.upload_photos(
        viewer["id"], files, car_id=car_id,
        caption=caption, tags=parse_tags(tags), specs=parse_specs(specs)
    )
