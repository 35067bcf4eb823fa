"""Validated merge request built from the command line."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from claude_mergetool.conflict.context import UNKNOWN_FILE, ConflictLabels
from claude_mergetool.conflict.mode import Mode, select_mode
from claude_mergetool.core.errors import InputNotFound
from claude_mergetool.core.log import logger


class MergeRequest(BaseModel):
    """Everything the pipeline needs after argument validation.

    Paths are absolute. Nothing downstream looks at raw arguments
    again once this exists.
    """

    model_config = ConfigDict(frozen=True)

    base: Path
    left: Path
    right: Path
    labels: ConflictLabels = Field(default_factory=ConflictLabels)
    display_path: str = UNKNOWN_FILE
    marker_size: PositiveInt | None = None
    mode: Mode

    @property
    def destination(self) -> Path:
        return self.mode.destination(self.left)


def resolve_request(
    base: Path,
    left: Path,
    right: Path,
    git_merge_driver: bool = False,
    output: Path | None = None,
    labels: ConflictLabels | None = None,
    display_path: str | None = None,
    marker_size: int | None = None,
) -> MergeRequest:
    """Decide the mode and check that all three inputs exist.

    Mode is checked first so that a call missing both mode flags
    fails the same way whether or not its paths exist.

    Raises:
        AmbiguousMode: If neither --git-merge-driver nor -o was given
        InputNotFound: If base, left or right is not an existing file
    """
    mode = select_mode(git_merge_driver, output)

    paths = {}
    for role, path in (("base", base), ("left", left), ("right", right)):
        path = Path(path).absolute()
        if not path.is_file():
            raise InputNotFound(role, path)
        paths[role] = path

    request = MergeRequest(
        **paths,
        labels=labels or ConflictLabels(),
        display_path=display_path or UNKNOWN_FILE,
        marker_size=marker_size,
        mode=mode,
    )
    logger.debug(
        "Merge request resolved",
        mode=request.mode.kind,
        destination=str(request.destination),
    )
    return request
