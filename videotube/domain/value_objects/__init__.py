"""Domain value objects."""

from videotube.domain.value_objects.byte_range import ByteRange

__all__ = [
    "ByteRange",
]
