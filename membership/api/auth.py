"""Identity supplied by the external authentication layer.

Requests arrive already authenticated; the upstream gateway forwards the
caller's opaque subject and role claim as headers. No verification happens
here.
"""

from dataclasses import dataclass

from fastapi import Header

from membership.errors import UnauthorizedError


@dataclass(frozen=True)
class Identity:
    """Caller identity: opaque subject plus role claim."""

    subject: str
    role: str | None = None


def get_identity(
    x_identity: str | None = Header(default=None),
    x_role: str | None = Header(default=None),
) -> Identity:
    """FastAPI dependency returning the caller's identity.

    Raises:
        UnauthorizedError: If no identity header is present
    """
    if not x_identity or not x_identity.strip():
        raise UnauthorizedError("Missing X-Identity header")
    return Identity(subject=x_identity.strip(), role=(x_role or "").strip() or None)


__all__ = ["Identity", "get_identity"]
