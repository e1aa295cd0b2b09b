from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class CrateSummary(BaseModel):
    """The ``crate`` object of a ``/api/v1/crates/{name}`` response."""

    id: Optional[str] = None
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VersionInfo(BaseModel):
    """One entry of the ``versions`` array as the registry returns it."""

    crate: Optional[str] = None
    crate_size: Optional[int] = None
    num: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    dl_path: str

    def to_version(self) -> Version:
        return Version(version=self.num, created=self.created_at, dl_path=self.dl_path)


class CrateInfo(BaseModel):
    """Parsed crate metadata.

    Rebuilt from scratch on every fetch; fields the registry adds beyond
    the ones declared here are ignored.
    """

    crate: CrateSummary
    versions: list[VersionInfo]


class Version(BaseModel):
    """Reduced view of a published version."""

    version: str
    created: datetime
    dl_path: str
