"""Validation helper functions for request data."""
import math
from typing import Optional

from ..common.exceptions import ValidationError


def get_json_or_error(request) -> dict:
    """
    Get the JSON object body of a request.

    Raises:
        ValidationError: body missing or not a JSON object
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def parse_float_arg(args, name: str, default: Optional[float] = None) -> float:
    """
    Read a float query parameter.

    Raises:
        ValidationError: missing without default, or not a finite number
    """
    raw = args.get(name)
    if raw is None or raw == "":
        if default is None:
            raise ValidationError(f"Query parameter '{name}' is required", field=name)
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValidationError(f"Query parameter '{name}' must be a number, got '{raw}'", field=name)
    if not math.isfinite(value):
        raise ValidationError(f"Query parameter '{name}' must be finite", field=name)
    return value


def validate_required_fields(data: dict, required_fields):
    """
    Raises:
        ValidationError: for the first missing or blank field
    """
    for field in required_fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"Field '{field}' is required", field=field)


def validate_coordinates(lat: float, lng: float):
    if not -90 <= lat <= 90:
        raise ValidationError(f"Latitude must be between -90 and 90, got {lat}", field="lat")
    if not -180 <= lng <= 180:
        raise ValidationError(f"Longitude must be between -180 and 180, got {lng}", field="lng")


def validate_radius(radius_meters: float, max_radius_meters: float):
    if not 0 < radius_meters <= max_radius_meters:
        raise ValidationError(
            f"Radius must be greater than 0 and at most {max_radius_meters:g} meters, got {radius_meters}",
            field="radius"
        )
