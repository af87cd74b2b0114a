"""Immutable per-session crop options."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..config import DEFAULT_FILL, LOCAL_ORIGIN, MARQUEE_RECTANGLE
from .schema import merge_with_defaults


@dataclass(frozen=True)
class CropOptions:
    """Options recognised by :class:`~canvascrop.session.CropSession`.

    ``marquee_type`` selects the shape variant, ``constrain_ratio`` forces a
    1:1 aspect ratio during resize, ``image_source`` names the image to load
    when none is passed to ``start`` and ``raw_data_output`` enables pixel
    export on release.
    """

    marquee_type: str = MARQUEE_RECTANGLE
    constrain_ratio: bool = True
    image_source: str = ""
    raw_data_output: bool = False
    fill: str = DEFAULT_FILL
    origin: str = LOCAL_ORIGIN

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None = None) -> "CropOptions":
        """Build options from camelCase keys, applying defaults and validation."""

        values = merge_with_defaults(data)
        return cls(
            marquee_type=values["marqueeType"],
            constrain_ratio=values["constrainRatio"],
            image_source=values["imageSource"],
            raw_data_output=values["rawDataOutput"],
            fill=values["fill"],
            origin=values["origin"],
        )

    def as_mapping(self) -> dict[str, Any]:
        """Export the options using the collaborator-facing key names."""

        return {
            "marqueeType": self.marquee_type,
            "constrainRatio": self.constrain_ratio,
            "imageSource": self.image_source,
            "rawDataOutput": self.raw_data_output,
            "fill": self.fill,
            "origin": self.origin,
        }
