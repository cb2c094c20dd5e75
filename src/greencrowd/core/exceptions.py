"""Service error taxonomy.

The geometric core never raises; these errors cover the layers around it
(catalog loading, lookups, KML decoding). Each carries a stable machine-readable
``code`` so the API and CLI can report failures consistently.
"""

from __future__ import annotations


class GreenCrowdError(Exception):
    """Base exception for all GreenCrowd domain errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. ``"CAMPAIGN_NOT_FOUND"``).
    """

    default_code: str = "GREENCROWD_ERROR"

    def __init__(self, message: str = "", *, code: str = "") -> None:
        self.message = message
        self.code = code or self.default_code
        super().__init__(message)

    def to_error_dict(self) -> dict[str, str]:
        """Return the ``{"code", "message"}`` payload used in API error details."""
        return {"code": self.code, "message": self.message}


class CatalogError(GreenCrowdError):
    """The campaign catalog is missing or does not validate."""

    default_code = "CATALOG_ERROR"


class NotFoundError(GreenCrowdError):
    default_code = "NOT_FOUND"


class CampaignNotFoundError(NotFoundError):
    default_code = "CAMPAIGN_NOT_FOUND"


class PoiNotFoundError(NotFoundError):
    default_code = "POI_NOT_FOUND"


class KmlError(GreenCrowdError):
    """A KML document could not be parsed."""

    default_code = "KML_PARSE_FAILED"
