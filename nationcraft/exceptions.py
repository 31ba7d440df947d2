"""
Application Exception Hierarchy

Provides structured exceptions for:
- API failures (server status, Claude)
- Validation errors
- Team registry errors
- Configuration errors
"""

from typing import Optional, Any


class NationCraftError(Exception):
    """Base exception for all NationCraft bot errors"""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }

    def __str__(self) -> str:
        return self.message


# ==================== API Errors ====================

class APIError(NationCraftError):
    """Base class for API-related errors"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        **kwargs: Any
    ):
        self.status_code = status_code
        self.response_body = response_body
        details = {"status_code": status_code, **kwargs}
        super().__init__(message, details)


class StatusAPIError(APIError):
    """Server status lookup (mcstatus.io) error"""

    @classmethod
    def not_found(cls, address: str) -> "StatusAPIError":
        return cls(f"Server not found: {address}", status_code=404)

    @classmethod
    def rate_limited(cls, retry_after: Optional[int] = None) -> "StatusAPIError":
        msg = "Rate limited by status API"
        if retry_after:
            msg += f". Retry after {retry_after}s"
        return cls(msg, status_code=429, retry_after=retry_after)

    @classmethod
    def server_error(cls, status_code: int) -> "StatusAPIError":
        return cls(f"Status API server error (HTTP {status_code})", status_code=status_code)

    @classmethod
    def malformed(cls, reason: str) -> "StatusAPIError":
        return cls(f"Unexpected status document: {reason}")

    @classmethod
    def connection_failed(cls, reason: str) -> "StatusAPIError":
        return cls(f"Failed to reach status API: {reason}")


class ClaudeAPIError(APIError):
    """Anthropic Claude API error"""

    @classmethod
    def rate_limited(cls, retry_after: Optional[int] = None) -> "ClaudeAPIError":
        msg = "Claude API rate limited"
        if retry_after:
            msg += f". Retry after {retry_after}s"
        return cls(msg, status_code=429, retry_after=retry_after)

    @classmethod
    def overloaded(cls) -> "ClaudeAPIError":
        return cls("Claude API is overloaded. Please try again in a moment.", status_code=529)

    @classmethod
    def invalid_request(cls, reason: str) -> "ClaudeAPIError":
        return cls(f"Invalid request to Claude API: {reason}", status_code=400)

    @classmethod
    def authentication_failed(cls) -> "ClaudeAPIError":
        return cls(
            "Invalid Anthropic API key. "
            "Get a valid key at https://console.anthropic.com",
            status_code=401
        )

    @classmethod
    def connection_failed(cls) -> "ClaudeAPIError":
        return cls("Failed to connect to Claude API. Check your internet connection.")

    @classmethod
    def timeout(cls) -> "ClaudeAPIError":
        return cls("Claude API request timed out. Please try again.")

    @classmethod
    def empty_response(cls) -> "ClaudeAPIError":
        return cls("Claude API returned no text content.")


# ==================== Validation Errors ====================

class ValidationError(NationCraftError):
    """Input validation error"""

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.value = value
        details = {"field": field}
        if value is not None:
            details["value"] = str(value)[:100]  # Truncate for safety
        super().__init__(message, details)


class InvalidCoordinateError(ValidationError):
    """Coordinate outside the world border"""

    def __init__(self, axis: str, value: int, min_value: int, max_value: int):
        msg = f"Coordinate {axis} must be between {min_value} and {max_value}, got {value}"
        super().__init__(field=axis, message=msg, value=value)


class InvalidVisibilityError(ValidationError):
    """Unknown coordinate visibility"""

    def __init__(self, visibility: str, valid: list[str]):
        msg = f"Invalid visibility: '{visibility}'. Valid options: {', '.join(valid)}"
        super().__init__(field="visibility", message=msg, value=visibility)
        self.valid = valid


class InvalidNameError(ValidationError):
    """Empty, too long or malformed name"""

    def __init__(self, field: str, name: str, reason: str):
        super().__init__(field=field, message=f"Invalid {field}: {reason}", value=name)


class InvalidLimitError(ValidationError):
    """Result limit out of range"""

    def __init__(self, limit: int, min_limit: int = 1, max_limit: int = 50):
        msg = f"Limit must be between {min_limit} and {max_limit}, got {limit}"
        super().__init__(field="limit", message=msg, value=limit)


# ==================== Team Errors ====================

class TeamError(NationCraftError):
    """Team registry error"""
    pass


class TeamNotFoundError(TeamError):
    """Team does not exist"""

    def __init__(self, name: str):
        super().__init__(f"Team not found: {name}", {"team": name})
        self.name = name


class TeamNameTakenError(TeamError):
    """Team name already registered"""

    def __init__(self, name: str):
        super().__init__(f"A team called '{name}' already exists", {"team": name})
        self.name = name


class AlreadyInTeamError(TeamError):
    """User already belongs to a team"""

    def __init__(self, user_id: int, team_name: str):
        super().__init__(
            f"You are already in team '{team_name}'. Leave it first with /leaveteam",
            {"user_id": user_id, "team": team_name}
        )
        self.user_id = user_id
        self.team_name = team_name


class NotInTeamError(TeamError):
    """User has no team"""

    def __init__(self, user_id: int):
        super().__init__("You are not in a team", {"user_id": user_id})
        self.user_id = user_id


class NotTeamOwnerError(TeamError):
    """Only the owner may manage join requests"""

    def __init__(self, user_id: int, team_name: str):
        super().__init__(
            f"Only the owner of '{team_name}' can do that",
            {"user_id": user_id, "team": team_name}
        )
        self.user_id = user_id
        self.team_name = team_name


class NoPendingRequestError(TeamError):
    """No join request to accept or deny"""

    def __init__(self, user_id: int, team_name: str):
        super().__init__(
            f"No pending join request from that user for '{team_name}'",
            {"user_id": user_id, "team": team_name}
        )
        self.user_id = user_id
        self.team_name = team_name


# ==================== Configuration Errors ====================

class ConfigurationError(NationCraftError):
    """Configuration error"""
    pass


class MissingConfigError(ConfigurationError):
    """Required configuration missing"""

    def __init__(self, key: str, hint: Optional[str] = None):
        msg = f"Required configuration missing: {key}"
        if hint:
            msg += f". {hint}"
        super().__init__(msg, {"key": key})
        self.key = key
