"""Sticker pack manifest model.

contents.json format:
    {
        "androidPlayStoreLink": "https://play.google.com/store/apps/details?id=...",
        "iosAppStoreLink": "https://itunes.apple.com/app/...",
        "stickerPacks": [
            {
                "identifier": "cats",
                "name": "Cats",
                "publisher": "Jane",
                "trayImageFile": "tray.png",
                "stickers": [
                    {"imageFileName": "01.webp", "emojis": ["😺"]},
                    ...
                ]
            }
        ]
    }

Store links live at the document level and are copied onto every pack.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Sticker:
    """Single sticker entry.

    Attributes:
        image_file_name: WebP asset filename inside the pack folder.
        emojis: Emoji glyphs associated with the sticker.
    """

    image_file_name: str
    emojis: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary using manifest field names."""
        return {
            "imageFileName": self.image_file_name,
            "emojis": list(self.emojis),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Sticker:
        """Create from dictionary."""
        return cls(
            image_file_name=data["imageFileName"],
            emojis=tuple(data.get("emojis", ())),
        )


@dataclass(frozen=True)
class StickerPack:
    """Sticker pack with its ordered stickers.

    Attributes:
        identifier: Globally unique pack identifier, also the asset folder name.
        name: Display name.
        publisher: Publisher display name.
        tray_image_file: Tray icon filename inside the pack folder.
        publisher_email: Optional contact email.
        publisher_website: Optional publisher URL.
        privacy_policy_website: Optional privacy policy URL.
        license_agreement_website: Optional license URL.
        android_play_store_link: Document-level Play Store link.
        ios_app_store_link: Document-level App Store link.
        stickers: Stickers in display order.
    """

    identifier: str
    name: str
    publisher: str
    tray_image_file: str
    publisher_email: str | None = None
    publisher_website: str | None = None
    privacy_policy_website: str | None = None
    license_agreement_website: str | None = None
    android_play_store_link: str | None = None
    ios_app_store_link: str | None = None
    stickers: tuple[Sticker, ...] = field(default_factory=tuple)

    @property
    def asset_names(self) -> frozenset[str]:
        """Tray icon plus every sticker filename."""
        return frozenset([self.tray_image_file, *(s.image_file_name for s in self.stickers)])

    def get_sticker(self, image_file_name: str) -> Sticker | None:
        """Get sticker by filename."""
        for sticker in self.stickers:
            if sticker.image_file_name == image_file_name:
                return sticker
        return None

    def with_store_links(
        self,
        android_play_store_link: str | None,
        ios_app_store_link: str | None,
    ) -> StickerPack:
        """Return a copy carrying the document-level store links."""
        return dataclasses.replace(
            self,
            android_play_store_link=android_play_store_link,
            ios_app_store_link=ios_app_store_link,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary using manifest field names.

        Store links are omitted; they belong to the enclosing Manifest.
        """
        data: dict[str, Any] = {
            "identifier": self.identifier,
            "name": self.name,
            "publisher": self.publisher,
            "trayImageFile": self.tray_image_file,
        }
        optional = {
            "publisherEmail": self.publisher_email,
            "publisherWebsite": self.publisher_website,
            "privacyPolicyWebsite": self.privacy_policy_website,
            "licenseAgreementWebsite": self.license_agreement_website,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        data["stickers"] = [s.to_dict() for s in self.stickers]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StickerPack:
        """Create from dictionary."""
        return cls(
            identifier=data["identifier"],
            name=data["name"],
            publisher=data["publisher"],
            tray_image_file=data["trayImageFile"],
            publisher_email=data.get("publisherEmail"),
            publisher_website=data.get("publisherWebsite"),
            privacy_policy_website=data.get("privacyPolicyWebsite"),
            license_agreement_website=data.get("licenseAgreementWebsite"),
            android_play_store_link=data.get("androidPlayStoreLink"),
            ios_app_store_link=data.get("iosAppStoreLink"),
            stickers=tuple(Sticker.from_dict(s) for s in data.get("stickers", [])),
        )


@dataclass(frozen=True)
class Manifest:
    """Parsed contents.json document.

    Attributes:
        sticker_packs: Packs in document order, store links already applied.
        android_play_store_link: Optional Play Store link for every pack.
        ios_app_store_link: Optional App Store link for every pack.
    """

    sticker_packs: tuple[StickerPack, ...]
    android_play_store_link: str | None = None
    ios_app_store_link: str | None = None

    def get_pack(self, identifier: str) -> StickerPack | None:
        """Get pack by identifier."""
        for pack in self.sticker_packs:
            if pack.identifier == identifier:
                return pack
        return None

    @property
    def identifiers(self) -> list[str]:
        """Pack identifiers in document order."""
        return [p.identifier for p in self.sticker_packs]

    def with_pack(self, pack: StickerPack) -> Manifest:
        """Return a copy with pack appended, store links applied."""
        linked = pack.with_store_links(self.android_play_store_link, self.ios_app_store_link)
        return dataclasses.replace(self, sticker_packs=(*self.sticker_packs, linked))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {}
        if self.android_play_store_link is not None:
            data["androidPlayStoreLink"] = self.android_play_store_link
        if self.ios_app_store_link is not None:
            data["iosAppStoreLink"] = self.ios_app_store_link
        data["stickerPacks"] = [p.to_dict() for p in self.sticker_packs]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Manifest:
        """Create from dictionary."""
        android = data.get("androidPlayStoreLink")
        ios = data.get("iosAppStoreLink")
        return cls(
            sticker_packs=tuple(
                StickerPack.from_dict(p).with_store_links(android, ios)
                for p in data.get("stickerPacks", [])
            ),
            android_play_store_link=android,
            ios_app_store_link=ios,
        )
