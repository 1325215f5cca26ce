# tutordesk/backend/api/utilities/limiter.py

from fastapi import Request
import jwt

from slowapi import Limiter
from slowapi.util import get_remote_address

from ...config.config import settings

def get_limiter_key(request: Request) -> str:
    """
    Rate limit için bir anahtar döndürür.
    İstekte geçerli bir JWT varsa token'ın 'sub' alanını, yoksa istemcinin
    IP adresini kullanır.
    """
    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        token = auth_header.split(" ", 1)[1]
        try:
            # Sadece kimliği okuyoruz; süre kontrolü get_current_user'da yapılır.
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM],
                options={"verify_exp": False}
            )
            subject = payload.get("sub")
            if subject:
                return str(subject)
        except jwt.PyJWTError:
            # Geçersiz token: IP bazlı limite geri dön.
            return get_remote_address(request)

    return get_remote_address(request)

limiter = Limiter(
    key_func=get_limiter_key,
    storage_uri=settings.RATE_LIMITER_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
)
