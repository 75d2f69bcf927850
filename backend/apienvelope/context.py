"""
API Envelope — Request-Scoped Caller Identity
===============================================

What:  Holds the caller identity read from the UserId header.
Why:   Route handlers need to know who is calling without parsing headers
       themselves.
How:   The envelope middleware creates one UserContext per request and stores
       it on request.state. Routes receive it through the get_user_context
       dependency.

Scoping:
    There is no module-level UserContext. Each request builds its own and the
    object lives in the ASGI scope of that request only, so concurrent
    requests can never observe each other's identity.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from starlette.requests import Request


@dataclass
class UserContext:
    """Identity of the caller for the current request. id stays None when no header was sent."""
    id: Optional[uuid.UUID] = None

    @property
    def is_identified(self) -> bool:
        return self.id is not None


def get_user_context(request: Request) -> UserContext:
    """
    FastAPI dependency returning the current request's UserContext.

    Bypassed requests (docs, downloads, OPTIONS) never pass through the
    identity step, so they get a fresh anonymous context.
    """
    user = getattr(request.state, "user", None)
    if user is None:
        user = UserContext()
        request.state.user = user
    return user
