"""
Pydantic models for generated NGINX configuration.

A run produces one ConfigFragment per optional feature and a single
RenderedConfiguration that embeds them.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from models.options import Feature, SiteIdentity


class ConfigFragment(BaseModel):
    """
    A self-contained location block for one feature.

    The content is empty when the feature is disabled or a precondition
    (such as the PAM module being installed) is not met.
    """

    model_config = ConfigDict(frozen=True)

    feature: Feature
    content: str = ""

    @property
    def enabled(self) -> bool:
        return bool(self.content.strip())

    @classmethod
    def empty(cls, feature: Feature) -> "ConfigFragment":
        return cls(feature=feature)


class RenderedConfiguration(BaseModel):
    """Complete nginx.conf document ready to be written."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(..., description="Full configuration text")
    generated_at: datetime = Field(..., description="Time recorded in the header comment")
    site: SiteIdentity
    features: tuple[Feature, ...] = Field(
        default_factory=tuple,
        description="Features whose fragments are present, in document order"
    )
