from typing import Optional

from notetree.core.security import extract_token_from_header, verify_token


class IdentityResolver:
    """Определение постоянного идентификатора пользователя по токену.

    Токены выпускает внешний провайдер аутентификации, идентификатор
    пользователя берется из claim ``sub``. None означает, что вызывающий
    не аутентифицирован.
    """

    def resolve_token(self, token: Optional[str]) -> Optional[str]:
        """Получение user id из JWT токена"""
        if not token:
            return None

        payload = verify_token(token)
        if not payload:
            return None

        subject = payload.get("sub")
        return str(subject) if subject else None

    def resolve_header(self, authorization: Optional[str]) -> Optional[str]:
        """Получение user id из заголовка Authorization"""
        return self.resolve_token(extract_token_from_header(authorization))
