"""Object store abstractions and implementations."""

from videotube.commons.infrastructure.blob.base import (
    BlobMetadata,
    BlobStorageBase,
    DeliveryMode,
    HealthStatus,
    UploadPlan,
    plan_upload,
)
from videotube.commons.infrastructure.blob.minio_provider import (
    BlobNotFoundError,
    MinioBlobStorage,
    public_read_policy,
)

__all__ = [
    # Base classes
    "BlobMetadata",
    "BlobStorageBase",
    "DeliveryMode",
    "HealthStatus",
    # Upload strategy
    "UploadPlan",
    "plan_upload",
    # Implementations
    "MinioBlobStorage",
    "public_read_policy",
    # Exceptions
    "BlobNotFoundError",
]
