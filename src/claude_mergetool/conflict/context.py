"""Conflict context: the three file versions and how to label them."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from claude_mergetool.conflict.mode import Mode
from claude_mergetool.core.errors import InputReadError
from claude_mergetool.core.log import logger

if TYPE_CHECKING:
    from claude_mergetool.conflict.request import MergeRequest

UNKNOWN_FILE = "unknown file"


class ConflictLabels(BaseModel):
    """Display labels for base, left and right.

    A missing base label means no ancestor name is shown anywhere.
    """

    model_config = ConfigDict(frozen=True)

    base: str | None = None
    left: str = "ours"
    right: str = "theirs"


class ConflictSide(BaseModel):
    """One version of the conflicted file, read verbatim."""

    model_config = ConfigDict(frozen=True)

    role: str
    path: Path
    content: bytes = Field(repr=False)


class ConflictContext(BaseModel):
    """Unit of work for one invocation. Never mutated once built."""

    model_config = ConfigDict(frozen=True)

    base: ConflictSide
    left: ConflictSide
    right: ConflictSide
    labels: ConflictLabels
    display_path: str = UNKNOWN_FILE
    marker_size: int | None = None
    mode: Mode

    @property
    def destination(self) -> Path:
        """Where the resolver must write the resolved file."""
        return self.mode.destination(self.left.path)

    @property
    def sides(self) -> tuple[ConflictSide, ConflictSide, ConflictSide]:
        return (self.base, self.left, self.right)


def read_side(role: str, path: Path) -> ConflictSide:
    """Read one input as bytes.

    Raises:
        InputReadError: If the file cannot be read, including when it
            vanished after validation
    """
    try:
        content = path.read_bytes()
    except OSError as e:
        raise InputReadError(role, path, e) from e
    logger.debug(f"Read {role} file", path=str(path), size=len(content))
    return ConflictSide(role=role, path=path, content=content)


def build_context(request: MergeRequest) -> ConflictContext:
    """Load base, left and right and pair them with their labels.

    No decoding, normalization or conflict-marker parsing happens
    here; contents are kept exactly as read.
    """
    return ConflictContext(
        base=read_side("base", request.base),
        left=read_side("left", request.left),
        right=read_side("right", request.right),
        labels=request.labels,
        display_path=request.display_path,
        marker_size=request.marker_size,
        mode=request.mode,
    )
