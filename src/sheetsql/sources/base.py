"""Base classes for workbook readers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any


@dataclass
class SheetSource:
    """One sheet of a workbook, read lazily.

    Attributes:
        name: Sheet name (the file stem for single-sheet formats like CSV)
        rows: Iterator over raw cell rows in source order
    """

    name: str
    rows: Iterator[Sequence[Any]]


class WorkbookReader(ABC):
    """Base class for all workbook readers.

    Each reader handles one family of file extensions. Readers are context
    managers so parser resources are released even when a sheet is abandoned
    half way (row cap, write failure).
    """

    extensions: tuple[str, ...] = ()

    def __init__(self, member_name: str, data: bytes):
        """Validate the payload and prepare for reading.

        Raises:
            UnsupportedMember: If the payload does not match the format
        """
        self.member_name = member_name
        self.data = data

    @property
    def stem(self) -> str:
        """File name without directories or extension."""
        return PurePosixPath(self.member_name).stem

    @property
    def single_sheet(self) -> bool:
        """Whether this format can only hold one sheet."""
        return False

    @abstractmethod
    def sheets(self) -> Iterator[SheetSource]:
        """Yield sheets in workbook order."""

    def close(self) -> None:  # noqa: B027
        """Release parser resources."""

    def __enter__(self) -> WorkbookReader:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
