"""XML adapter built on incremental ElementTree parsing."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterator, List, Optional

from ingest_hub.domain.records import Record
from ingest_hub.io.readers.base import BaseAdapter, SourceLike


def record_from_element(element: ET.Element, include_attributes: bool) -> Record:
    """
    One Record per row element.

    Attributes come first (when enabled), then child elements in document
    order. A child with no text binds as NULL.
    """
    pairs = []
    if include_attributes:
        pairs.extend(element.attrib.items())
    for child in element:
        text = child.text.strip() if child.text is not None else ""
        pairs.append((child.tag, text or None))
    return Record.from_pairs(pairs)


class XmlAdapter(BaseAdapter):
    """
    Decode repeated row elements from an XML document.

    Args:
        row_tag: Tag of the row elements; by default every direct child of the
            root element is a row
        include_attributes: Add row element attributes as columns
    """

    format_name = "xml"

    def __init__(self, row_tag: Optional[str] = None, include_attributes: bool = False):
        self.row_tag = row_tag
        self.include_attributes = include_attributes

    def _iter_records(self, source: SourceLike) -> Iterator[Record]:
        if isinstance(source, (str, Path)) and not Path(source).exists():
            raise FileNotFoundError(f"Source file not found: {source}")

        # open elements from the root down; finished elements are detached
        # from their parent so memory stays bounded by document depth
        stack: List[ET.Element] = []
        open_rows = 0
        for event, element in ET.iterparse(source, events=("start", "end")):
            if event == "start":
                stack.append(element)
                if self._is_row(element, len(stack)):
                    open_rows += 1
                continue

            is_row = self._is_row(element, len(stack))
            stack.pop()
            parent = stack[-1] if stack else None
            if is_row:
                open_rows -= 1
                yield record_from_element(element, self.include_attributes)
            elif open_rows:
                # part of a row still being built
                continue
            element.clear()
            if parent is not None:
                parent.remove(element)

    def _is_row(self, element: ET.Element, level: int) -> bool:
        """``level`` is 1 for the root element, 2 for its direct children."""
        if self.row_tag is not None:
            return element.tag == self.row_tag
        return level == 2
