from typing import AsyncIterator
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError

from .config import get_settings
from .client import MarketplaceClient

ALGO = "HS256"
bearer_scheme = HTTPBearer(auto_error=False)


async def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Token del usuario, validado con el mismo secreto que firma el marketplace."""
    if not credentials or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Token requerido")
    token = credentials.credentials
    try:
        payload = jwt.decode(token, get_settings().jwt_secret, algorithms=[ALGO])
    except JWTError:
        raise HTTPException(status_code=401, detail="Token inválido")
    if not (payload.get("id") or payload.get("sub")):
        raise HTTPException(status_code=401, detail="Token inválido")
    return token


async def get_marketplace_client(token: str = Depends(get_bearer_token)) -> AsyncIterator[MarketplaceClient]:
    """Cliente del marketplace que reenvía el token del usuario; se cierra al terminar la petición."""
    client = MarketplaceClient(token=token)
    try:
        yield client
    finally:
        await client.aclose()
