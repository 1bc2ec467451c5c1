from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from finix.app import App
from finix.errors import IdentityError

# The identity-aware proxy in front of the API verifies the end user's ID token
# and forwards the verified user id in this header.
user_id_scheme = APIKeyHeader(name="X-User-Id", auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_user_id(user_id: Annotated[str | None, Depends(user_id_scheme)] = None) -> str:
    """Get the verified caller's user id."""
    if user_id and user_id.strip():
        return user_id.strip()
    raise IdentityError


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
UserIdDep = Annotated[str, Depends(get_user_id)]
