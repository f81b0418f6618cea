"""Data models for check-image.

Models are Pydantic BaseModel classes; JSON and YAML documents use
kebab-case keys, mapped through field aliases.
"""

from check_image.models.config import (
    ChecksConfig,
    ConfigDocument,
    InlinePolicy,
    PolicyPath,
    PolicySource,
)
from check_image.models.image import ImageDigest, ImageMetadata, LayerInfo
from check_image.models.policy import (
    LabelRequirement,
    LabelsPolicy,
    RegistryPolicy,
    SecretsPolicy,
)
from check_image.models.result import (
    AllResult,
    CheckDetails,
    CheckOutcome,
    Summary,
)

__all__ = [
    # Config
    "ChecksConfig",
    "ConfigDocument",
    "InlinePolicy",
    "PolicyPath",
    "PolicySource",
    # Image
    "ImageDigest",
    "ImageMetadata",
    "LayerInfo",
    # Policy
    "LabelRequirement",
    "LabelsPolicy",
    "RegistryPolicy",
    "SecretsPolicy",
    # Result
    "AllResult",
    "CheckDetails",
    "CheckOutcome",
    "Summary",
]
