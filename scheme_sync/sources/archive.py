"""Lazy iteration over gzip tarballs."""

from __future__ import annotations

import io
import tarfile
from typing import Iterator


def entries(data: bytes) -> Iterator[tuple[str, bytes]]:
    """Yield ``(path, content)`` for every regular file in a ``.tar.gz`` payload.

    Raises ``tarfile.TarError`` (or ``OSError`` for a broken gzip stream) as
    soon as the corruption is reached.
    """

    with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as tar:
        for member in tar:
            if not member.isfile():
                continue
            handle = tar.extractfile(member)
            if handle is None:
                continue
            with handle:
                yield member.name, handle.read()


__all__ = ["entries"]
