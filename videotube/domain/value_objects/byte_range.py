"""HTTP byte range value object."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, model_validator

from videotube.domain.exceptions import RangeNotSatisfiableError

_RANGE_SPEC = re.compile(r"^\s*(\d*)\s*-\s*(\d*)\s*$")


class ByteRange(BaseModel):
    """An inclusive ``[start, end]`` window of an object's bytes.

    Examples:
        >>> r = ByteRange.parse("bytes=100-199", size=1000)
        >>> (r.start, r.end, r.length)
        (100, 199, 100)
        >>> r.content_range(1000)
        'bytes 100-199/1000'

        >>> ByteRange.parse("bytes=900-", size=1000).end
        999
    """

    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0)
    end: int = Field(ge=0)

    @model_validator(mode="after")
    def _ordered(self) -> ByteRange:
        if self.start > self.end:
            raise ValueError("start must not exceed end")
        return self

    @property
    def length(self) -> int:
        """Number of bytes in the window."""
        return self.end - self.start + 1

    def content_range(self, size: int) -> str:
        """Value of the ``Content-Range`` response header."""
        return f"bytes {self.start}-{self.end}/{size}"

    @classmethod
    def parse(cls, header: str, size: int) -> ByteRange:
        """Resolve a ``Range`` header against an object of ``size`` bytes.

        Supports ``bytes=start-end``, the open-ended ``bytes=start-`` and the
        suffix form ``bytes=-N``. An ``end`` past the last byte is clamped.

        Raises:
            RangeNotSatisfiableError: wrong unit, several ranges, non-numeric
                bounds, ``start > end`` or ``start >= size``.
        """
        unit, sep, spec = header.strip().partition("=")
        if not sep or unit.strip().lower() != "bytes":
            raise RangeNotSatisfiableError(header, size, "unit must be bytes")
        if "," in spec:
            raise RangeNotSatisfiableError(header, size, "multiple ranges")

        match = _RANGE_SPEC.match(spec)
        if match is None:
            raise RangeNotSatisfiableError(header, size, "bounds must be numeric")
        start_str, end_str = match.groups()

        if not start_str:
            if not end_str:
                raise RangeNotSatisfiableError(header, size, "empty range")
            suffix = int(end_str)
            if suffix == 0 or size == 0:
                raise RangeNotSatisfiableError(header, size, "empty suffix range")
            return cls(start=max(0, size - suffix), end=size - 1)

        start = int(start_str)
        end = int(end_str) if end_str else size - 1
        if end_str and start > end:
            raise RangeNotSatisfiableError(header, size, "start is after end")
        if start >= size:
            raise RangeNotSatisfiableError(header, size, "start is past the end")
        return cls(start=start, end=min(end, size - 1))
