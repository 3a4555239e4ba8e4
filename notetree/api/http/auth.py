from typing import Optional

from fastapi import Header, Request

from notetree.domains.identity.resolver import IdentityResolver

identity_resolver = IdentityResolver()


async def get_current_identity(
    authorization: Optional[str] = Header(default=None)
) -> Optional[str]:
    """Зависимость: user id вызывающего или None для анонимного запроса"""
    return identity_resolver.resolve_header(authorization)


def get_propagation_queue(request: Request):
    """Зависимость: очередь фонового распространения приложения"""
    return request.app.state.propagation
