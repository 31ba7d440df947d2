"""
Input Validation and Sanitization

Validates user input from slash commands before it reaches the database.
"""

import re
from typing import Optional

from .exceptions import (
    InvalidCoordinateError,
    InvalidVisibilityError,
    InvalidNameError,
    InvalidLimitError,
)


# Coordinate visibility options
VISIBILITY_PUBLIC = "public"
VISIBILITY_PRIVATE = "private"
VISIBILITY_TEAM = "team"
VALID_VISIBILITIES = [VISIBILITY_PUBLIC, VISIBILITY_PRIVATE, VISIBILITY_TEAM]

# Bedrock world border
WORLD_BORDER = 30_000_000

MAX_COORD_NAME_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 200

# Team names: 2-32 characters, letters, digits, spaces, underscores, hyphens
MIN_TEAM_NAME_LENGTH = 2
MAX_TEAM_NAME_LENGTH = 32
TEAM_NAME_PATTERN = re.compile(r"^[\w\- ]+$")

MIN_LIMIT = 1
MAX_LIMIT = 50


def validate_coordinate_name(name: str) -> str:
    """
    Validate a bookmark name.

    Returns:
        The stripped name

    Raises:
        InvalidNameError: If empty or too long
    """
    if not name or not isinstance(name, str) or not name.strip():
        raise InvalidNameError("name", str(name), "name cannot be empty")

    name = name.strip()
    if len(name) > MAX_COORD_NAME_LENGTH:
        raise InvalidNameError(
            "name", name, f"name too long (max {MAX_COORD_NAME_LENGTH} characters)"
        )
    return name


def validate_coordinates(x: int, y: int, z: int) -> tuple[int, int, int]:
    """
    Validate a block position.

    Every axis is bounded by the world border.

    Raises:
        InvalidCoordinateError: If any axis is out of range
    """
    for axis, value in (("x", x), ("y", y), ("z", z)):
        if not -WORLD_BORDER <= value <= WORLD_BORDER:
            raise InvalidCoordinateError(axis, value, -WORLD_BORDER, WORLD_BORDER)

    return x, y, z


def validate_visibility(visibility: str) -> str:
    """
    Normalize and validate a visibility option.

    Raises:
        InvalidVisibilityError: If not one of public, private, team
    """
    if not visibility or not isinstance(visibility, str):
        raise InvalidVisibilityError(str(visibility), VALID_VISIBILITIES)

    normalized = visibility.strip().lower()
    if normalized not in VALID_VISIBILITIES:
        raise InvalidVisibilityError(visibility, VALID_VISIBILITIES)
    return normalized


def validate_description(description: Optional[str]) -> Optional[str]:
    """Strip a description, returning None when empty"""
    if description is None:
        return None

    description = description.strip()
    if not description:
        return None
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise InvalidNameError(
            "description",
            description,
            f"description too long (max {MAX_DESCRIPTION_LENGTH} characters)"
        )
    return description


def validate_team_name(name: str) -> str:
    """
    Validate a team name.

    Raises:
        InvalidNameError: If empty, too short/long, or contains odd characters
    """
    if not name or not isinstance(name, str) or not name.strip():
        raise InvalidNameError("team name", str(name), "team name cannot be empty")

    name = " ".join(name.split())

    if len(name) < MIN_TEAM_NAME_LENGTH:
        raise InvalidNameError(
            "team name", name, f"too short (min {MIN_TEAM_NAME_LENGTH} characters)"
        )
    if len(name) > MAX_TEAM_NAME_LENGTH:
        raise InvalidNameError(
            "team name", name, f"too long (max {MAX_TEAM_NAME_LENGTH} characters)"
        )
    if not TEAM_NAME_PATTERN.match(name):
        raise InvalidNameError(
            "team name", name, "only letters, numbers, spaces, '_' and '-' are allowed"
        )
    return name


def validate_limit(limit: int) -> int:
    """
    Validate a leaderboard/listing limit.

    Raises:
        InvalidLimitError: If outside 1-50
    """
    if not isinstance(limit, int) or isinstance(limit, bool):
        raise InvalidLimitError(limit, MIN_LIMIT, MAX_LIMIT)
    if limit < MIN_LIMIT or limit > MAX_LIMIT:
        raise InvalidLimitError(limit, MIN_LIMIT, MAX_LIMIT)
    return limit


def sanitize_for_discord(text: str, max_length: int = 2000) -> str:
    """
    Make text safe to post as a Discord message.

    Neutralizes @everyone/@here pings and truncates to the message limit.
    """
    if not text:
        return ""

    text = text.replace("@everyone", "@​everyone").replace("@here", "@​here")
    if len(text) > max_length:
        text = text[:max_length - 3] + "..."
    return text
