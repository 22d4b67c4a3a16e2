"""In-memory search filters over already-fetched photo and profile rows."""

from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel


class PhotoSearchFilters(BaseModel):
    query: str = ""
    make: str = ""
    model: str = ""
    year: str = ""
    tags: List[str] = []
    has_likes: bool = False
    has_favorites: bool = False

    def is_active(self) -> bool:
        return any([
            self.query.strip(), self.make, self.model, self.year,
            self.tags, self.has_likes, self.has_favorites,
        ])


class CommunitySearchFilters(BaseModel):
    location: str = ""
    country: str = ""
    car_make: str = ""
    car_model: str = ""
    car_year: str = ""
    min_level: Optional[int] = None

    def has_car_filters(self) -> bool:
        return bool(self.car_make or self.car_model or self.car_year)


def _lower(value: Any) -> str:
    return str(value).lower() if value is not None else ""


def _photo_car(photo: Dict[str, Any]) -> Dict[str, Any]:
    return photo.get("user_car") or {}


def photo_matches(photo: Dict[str, Any], filters: PhotoSearchFilters) -> bool:
    car = _photo_car(photo)
    tags = photo.get("tags") or []

    query = filters.query.strip().lower()
    if query:
        haystack = [_lower(photo.get("caption")), _lower(car.get("make")), _lower(car.get("model"))]
        haystack.extend(_lower(t) for t in tags)
        if not any(query in text for text in haystack):
            return False

    if filters.make and _lower(car.get("make")) != filters.make.lower():
        return False
    if filters.model and _lower(car.get("model")) != filters.model.lower():
        return False
    if filters.year and str(car.get("year") or "") != filters.year:
        return False
    if filters.tags and not set(filters.tags).issubset(tags):
        return False
    if filters.has_likes and not (photo.get("likes_count") or 0) > 0:
        return False
    if filters.has_favorites and not (photo.get("favorites_count") or 0) > 0:
        return False
    return True


def filter_photos(photos: Iterable[Dict[str, Any]], filters: PhotoSearchFilters) -> List[Dict[str, Any]]:
    return [p for p in photos if photo_matches(p, filters)]


def car_matches(car: Dict[str, Any], filters: CommunitySearchFilters) -> bool:
    if filters.car_make and filters.car_make.lower() not in _lower(car.get("make")):
        return False
    if filters.car_model and filters.car_model.lower() not in _lower(car.get("model")):
        return False
    if filters.car_year and str(car.get("year") or "") != filters.car_year:
        return False
    return True


def filter_profiles(
    profiles: Iterable[Dict[str, Any]],
    cars_by_user: Dict[str, List[Dict[str, Any]]],
    filters: CommunitySearchFilters,
) -> List[Dict[str, Any]]:
    """Keep profiles with at least one current car matching every car predicate.

    Location, country and minimum level are expected to be applied by the
    query; they are re-checked here so the function also works on raw lists.
    """
    result = []
    for profile in profiles:
        if filters.country and profile.get("country") != filters.country:
            continue
        if filters.location and filters.country and profile.get("city") != filters.location:
            continue
        if filters.min_level is not None and (profile.get("level") or 0) < filters.min_level:
            continue
        if filters.has_car_filters():
            cars = cars_by_user.get(profile.get("id"), [])
            if not any(car_matches(car, filters) for car in cars):
                continue
        result.append(profile)
    return result


def available_makes(cars: Iterable[Dict[str, Any]]) -> List[str]:
    return sorted({c["make"] for c in cars if c.get("make")})


def available_models(cars: Iterable[Dict[str, Any]], make: str) -> List[str]:
    return sorted({c["model"] for c in cars if c.get("make") == make and c.get("model")})


def available_tags(photos: Iterable[Dict[str, Any]]) -> List[str]:
    return sorted({t for p in photos for t in (p.get("tags") or []) if t})
