"""Structured identity strings of the form ``subdomain@domain``."""

from __future__ import annotations

import re
from typing import Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import InvalidIdentity

_LABEL = r"[a-z0-9][a-z0-9_-]*"
SUBDOMAIN_RE = re.compile(r"^[a-z][a-z0-9_-]*$")
DOMAIN_RE = re.compile(rf"^{_LABEL}(\.{_LABEL})*$")


class IdentityComponents(BaseModel):
    """The two halves of an identity."""

    model_config = ConfigDict(frozen=True)

    subdomain: str
    domain: str


class CruxId(BaseModel):
    """Canonical messaging identity, e.g. ``foo123@cruxdev.crux``.

    Instances are immutable and compare equal when their canonical string
    forms are equal, so they can be used as dictionary keys.
    """

    model_config = ConfigDict(frozen=True)

    subdomain: str
    domain: str

    @field_validator("subdomain", "domain", mode="before")
    @classmethod
    def _canonicalize(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("subdomain")
    @classmethod
    def _check_subdomain(cls, v: str) -> str:
        if not SUBDOMAIN_RE.match(v):
            raise ValueError(f"Invalid subdomain: '{v}'")
        return v

    @field_validator("domain")
    @classmethod
    def _check_domain(cls, v: str) -> str:
        if not DOMAIN_RE.match(v):
            raise ValueError(f"Invalid domain: '{v}'")
        return v

    @classmethod
    def from_string(cls, value: str) -> "CruxId":
        """Parse ``subdomain@domain`` into a :class:`CruxId`."""
        if not isinstance(value, str) or value.count("@") != 1:
            raise InvalidIdentity(f"Invalid identity: '{value}'")
        subdomain, domain = value.split("@")
        try:
            return cls(subdomain=subdomain, domain=domain)
        except ValidationError as exc:
            raise InvalidIdentity(f"Invalid identity: '{value}'") from exc

    @classmethod
    def coerce(cls, value: Union[str, "CruxId"]) -> "CruxId":
        """Return ``value`` as a :class:`CruxId`, parsing strings."""
        if isinstance(value, CruxId):
            return value
        return cls.from_string(value)

    @property
    def components(self) -> IdentityComponents:
        return IdentityComponents(subdomain=self.subdomain, domain=self.domain)

    def __str__(self) -> str:
        return f"{self.subdomain}@{self.domain}"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CruxId):
            return str(self) == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(str(self))
