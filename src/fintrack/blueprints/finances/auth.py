"""Bearer-token guard resolving the requesting owner."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable

from flask import current_app, g, request

from ...config import BaseConfig
from ...exceptions import Unauthorized
from ...services.auth import resolve_token


def protect(view: Callable[..., Any]) -> Callable[..., Any]:
    """Require ``Authorization: Bearer <token>`` and expose ``g.owner_id``."""

    @wraps(view)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        scheme, _, token = request.headers.get("Authorization", "").partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            raise Unauthorized("Missing bearer token")
        config: BaseConfig = current_app.config["FINTRACK_CONFIG"]
        g.owner_id = resolve_token(token, config.SECRET_KEY, algorithm=config.TOKEN_ALGORITHM)
        return view(*args, **kwargs)

    return wrapper
