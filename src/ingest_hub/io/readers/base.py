"""
Format adapter contract and shared reading helpers.

An adapter turns one raw source (a file path, an open file or an in-memory
object) into a lazy iterator of Records in source order. Any failure while
decoding surfaces as ``DecodeError`` carrying the position of the record that
could not be produced; iteration ends there.
"""

from __future__ import annotations

import io
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, Iterator, Protocol, Union, runtime_checkable

from ingest_hub.domain.errors import DecodeError
from ingest_hub.domain.records import Record
from ingest_hub.utils.logging import get_logger

logger = get_logger(__name__)

SourceLike = Union[str, Path, IO[Any]]


@runtime_checkable
class FormatAdapter(Protocol):
    """Anything that can decode a source into Records."""

    format_name: str

    def open(self, source: Any) -> Iterator[Record]: ...


@contextmanager
def open_text(source: SourceLike, encoding: str = "utf-8") -> Iterator[IO[str]]:
    """
    Yield a text stream for ``source``.

    Paths are opened (and closed afterwards); streams are passed through and
    left open for the caller. ``utf-8-sig`` strips a leading BOM when the
    default encoding is requested.
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {path}")
        file_encoding = "utf-8-sig" if encoding == "utf-8" else encoding
        with open(path, "r", encoding=file_encoding, newline="") as fh:
            yield fh
    elif isinstance(source, io.TextIOBase) or hasattr(source, "read"):
        yield source
    else:
        raise TypeError(f"Cannot read from {type(source).__name__}")


def source_name(source: Any) -> str:
    if isinstance(source, (str, Path)):
        return str(source)
    return getattr(source, "name", type(source).__name__)


class BaseAdapter:
    """
    Common driver for adapters.

    Subclasses implement ``_iter_records`` as a plain generator and raise
    native errors; ``open`` converts them into ``DecodeError`` with the index
    of the record being produced.
    """

    format_name = "unknown"

    def open(self, source: Any) -> Iterator[Record]:
        """Return a lazy iterator of Records; nothing is read until iteration."""
        return self._guarded(source)

    def _iter_records(self, source: Any) -> Iterator[Record]:
        raise NotImplementedError

    def _guarded(self, source: Any) -> Iterator[Record]:
        position = 0
        records = self._iter_records(source)
        logger.debug("ingest.source.opened", format=self.format_name, source=source_name(source))
        while True:
            try:
                record = next(records)
            except StopIteration:
                break
            except DecodeError:
                raise
            except Exception as exc:
                logger.error(
                    "ingest.source.decode_failed",
                    format=self.format_name,
                    position=position,
                    error=str(exc),
                )
                raise DecodeError(str(exc), self.format_name, position) from exc
            yield record
            position += 1
        logger.debug("ingest.source.exhausted", format=self.format_name, records=position)
