"""Request-scoped dependencies.

Authorization is enforced upstream of this service; the only caller
identity the ledger keeps is the free-text ``created_by`` taken from the
``X-Actor`` header.
"""

from __future__ import annotations

from fastapi import Header


def get_actor(x_actor: str | None = Header(default=None)) -> str | None:
    if x_actor is None:
        return None
    return x_actor.strip() or None
