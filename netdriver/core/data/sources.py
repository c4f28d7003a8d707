"""Declarative descriptions of the data consumed by a task."""

from dataclasses import dataclass, field
from typing import Annotated

from pydantic import ConfigDict, Field, with_config


@with_config(ConfigDict(extra="forbid"))
@dataclass(frozen=True, slots=True)
class DataSource:
    """Describes one external data source.

    A source with an empty path is considered absent.

    Attributes:
        path: Location of the source.
        reader_kind: Registered reader used to decode the source.
        binarize: Whether samples are binarized after reading.
        normalize: Whether samples are normalized after reading (and after
            binarization when both are requested).
        limit: Maximum number of records to read. None or 0 reads everything.
    """

    path: str = ""
    reader_kind: str = "mnist"
    binarize: bool = False
    normalize: bool = False
    limit: Annotated[int, Field(ge=0)] | None = None

    def is_present(self) -> bool:
        return bool(self.path)

    @property
    def effective_limit(self) -> int:
        """The limit handed to readers, 0 meaning "read all"."""
        if self.limit is not None and self.limit > 0:
            return self.limit
        return 0


@with_config(ConfigDict(extra="forbid"))
@dataclass(frozen=True, slots=True)
class DataSourcePair:
    """Samples and labels sources of a single phase."""

    samples: DataSource = field(default_factory=DataSource)
    labels: DataSource = field(default_factory=DataSource)

    def is_complete(self) -> bool:
        """Whether both samples and labels are present."""
        return self.samples.is_present() and self.labels.is_present()

    def missing(self) -> tuple[str, ...]:
        """Names of the absent sources, in (samples, labels) order."""
        absent = []
        if not self.samples.is_present():
            absent.append("samples")
        if not self.labels.is_present():
            absent.append("labels")
        return tuple(absent)


__all__ = ["DataSource", "DataSourcePair"]
