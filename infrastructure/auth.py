import logging
import time
from typing import Any, Dict, Optional

import httpx
from jose import JWTError, jwt

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Sign-in, sign-up or token verification failed."""


class AuthClient:
    """Talks to the hosted auth service and resolves viewer roles."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        jwt_secret: str,
        timeout: float = 30.0,
        role_cache_ttl: float = 300.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.jwt_secret = jwt_secret
        self.timeout = timeout
        self.role_cache_ttl = role_cache_ttl
        self.transport = transport
        # user_id -> (is_admin, expiry)
        self._role_cache: Dict[str, tuple] = {}

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/auth/v1/{path}",
                    json=payload,
                    headers={"apikey": self.api_key},
                )
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as e:
                logger.error(f"Auth request {path} failed: {e.response.status_code} - {e.response.text}")
                try:
                    detail = e.response.json()
                except ValueError:
                    detail = {}
                message = detail.get("error_description") or detail.get("msg") or "Authentication failed"
                raise AuthError(message) from e
            except httpx.RequestError as e:
                logger.error(f"Auth request {path} failed: {str(e)}")
                raise AuthError("Could not reach the authentication service") from e
            except ValueError as e:
                raise AuthError("Authentication service returned invalid JSON") from e

    async def sign_in(self, email: str, password: str) -> str:
        data = await self._post("token?grant_type=password", {"email": email, "password": password})
        access_token = data.get("access_token")
        if not access_token:
            raise AuthError("No access token in sign-in response")
        logger.info(f"Signed in {email}")
        return access_token

    async def sign_up(self, email: str, password: str) -> Optional[str]:
        """Registers a user. Returns an access token when the service signs the user in right away."""
        data = await self._post("signup", {"email": email, "password": password})
        logger.info(f"Registered {email}")
        return data.get("access_token")

    def verify_token(self, token: str) -> Dict[str, Any]:
        if not self.jwt_secret:
            raise AuthError("JWT secret is not configured")
        try:
            payload = jwt.decode(
                token,
                self.jwt_secret,
                algorithms=["HS256"],
                audience="authenticated",
                options={"leeway": 30},
            )
        except JWTError as e:
            logger.warning(f"JWT validation failed: {e}")
            raise AuthError("Invalid token") from e
        if not payload.get("sub"):
            raise AuthError("Token has no subject")
        return payload

    async def is_admin(self, user_id: str, access_token: str) -> bool:
        current_time = time.time()
        cached = self._role_cache.get(user_id)
        if cached and current_time < cached[1]:
            return cached[0]

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/rest/v1/user_roles",
                    params={"select": "role", "user_id": f"eq.{user_id}", "role": "eq.admin"},
                    headers={"apikey": self.api_key, "Authorization": f"Bearer {access_token}"},
                )
                response.raise_for_status()
                admin = bool(response.json())
            except (httpx.HTTPError, ValueError) as e:
                # not cached, so the next request asks again
                logger.error(f"Role lookup for {user_id} failed: {e}")
                return False

        self._role_cache[user_id] = (admin, current_time + self.role_cache_ttl)
        logger.debug(f"Role lookup for {user_id}: admin={admin}")
        return admin
