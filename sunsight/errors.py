"""Error types for sun position and line-of-sight analysis."""

from typing import List, Optional


class SunsightError(Exception):
    """Base exception for sunsight errors."""

    def __init__(self, message: str, suggestions: Optional[List[str]] = None):
        """Initialize with message and optional suggestions.

        Args:
            message: Error description
            suggestions: Optional list of actionable suggestions
        """
        self.message = message
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with suggestions."""
        formatted = f"{self.message}"
        if self.suggestions:
            formatted += "\n\nSuggestions:"
            for suggestion in self.suggestions:
                formatted += f"\n  - {suggestion}"
        return formatted


class InvalidArgumentError(SunsightError, ValueError):
    """Raised when a caller passes a value outside its contract."""


class CoordinateRangeError(InvalidArgumentError):
    """Raised when a latitude or longitude is out of range."""

    def __init__(self, latitude: float, longitude: float):
        message = f"Invalid coordinates: latitude={latitude}, longitude={longitude}"
        suggestions = [
            "Latitude must be within [-90, 90] degrees",
            "Longitude must be within [-180, 180] degrees",
            "Check that latitude and longitude were not swapped",
        ]
        super().__init__(message, suggestions)


class InvalidRingError(InvalidArgumentError):
    """Raised when a building footprint ring is malformed."""

    def __init__(self, building_id: object, reason: str):
        message = f"Invalid footprint ring for building {building_id}: {reason}"
        suggestions = [
            "A ring needs at least 4 [lon, lat] points with first == last",
            "Use normalize_buildings() to drop malformed records from a batch",
        ]
        super().__init__(message, suggestions)


class GeometricDegenerateError(SunsightError):
    """Raised when ring or ray math fails for a single building."""

    def __init__(self, building_id: object, operation: str, cause: Optional[Exception] = None):
        self.building_id = building_id
        self.operation = operation
        message = f"Degenerate geometry for building {building_id} during {operation}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)
