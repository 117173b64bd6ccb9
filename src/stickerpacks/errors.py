"""Error taxonomy for the sticker pack pipeline.

Parse errors, validation violations and router errors all derive from
StickerPackError so callers at the transport boundary can catch one type.
"""

from __future__ import annotations


class StickerPackError(Exception):
    """Base exception for sticker pack operations."""


class SchemaError(StickerPackError):
    """Raised when the manifest document does not match the fixed schema."""


class ValidationViolation(StickerPackError):
    """Raised when a pack breaks an integrity rule.

    Attributes:
        identifier: Pack identifier the rule was checked against.
        filename: Asset filename involved, if the rule is about an asset.
    """

    def __init__(
        self,
        message: str,
        *,
        identifier: str | None = None,
        filename: str | None = None,
    ) -> None:
        super().__init__(message)
        self.identifier = identifier
        self.filename = filename


class FieldViolation(ValidationViolation):
    """Empty, oversized or badly formed text field."""


class LinkViolation(ValidationViolation):
    """Malformed URL, wrong scheme or wrong store domain."""


class BinaryFormatViolation(ValidationViolation):
    """Oversized, undecodable, wrongly sized or animated image asset."""


class CountViolation(ValidationViolation):
    """Sticker or emoji count out of range."""


class AssetNotFound(StickerPackError, LookupError):
    """Raised when an asset is unknown to the store or to the route table."""


class RouteNotFound(StickerPackError, LookupError):
    """Raised when a URI matches none of the registered routes."""


class UnsupportedOperation(StickerPackError, NotImplementedError):
    """Raised for mutations the provider does not support."""
