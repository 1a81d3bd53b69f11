"""
Base Service Client for Internal Microservice Communication

Base class for HTTP clients that talk to peer platform services.
"""

import httpx
import logging
from typing import Optional, Dict, Any
from abc import ABC

logger = logging.getLogger(__name__)


class BaseServiceClient(ABC):
    """
    Base class for microservice clients

    Handles:
    1. Endpoint resolution
    2. HTTP client lifecycle
    3. Timeouts

    Example:
        class WalletServiceClient(BaseServiceClient):
            service_name = "wallet_service"
            default_port = 8208

            async def get_wallet(self, wallet_id: str):
                response = await self.get(f"/api/v1/wallets/{wallet_id}")
                return response.json()
    """

    # Subclasses define these
    service_name: str = None
    default_port: int = None
    env_host_key: Optional[str] = None
    env_port_key: Optional[str] = None

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the service client

        Args:
            base_url: Service base URL (resolved from environment when omitted)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        if not self.service_name:
            raise ValueError(f"{self.__class__.__name__} must define 'service_name'")

        if base_url:
            self.base_url = base_url.rstrip('/')
        else:
            self.base_url = self._discover_service()

        self.client = httpx.AsyncClient(
            timeout=timeout,
            headers=self._build_default_headers(),
            transport=transport,
        )

        logger.debug(f"Initialized {self.service_name} client: {self.base_url}")

    def _discover_service(self) -> str:
        """Resolve the service base URL from environment or defaults"""
        from core.config_manager import ConfigManager

        prefix = self.service_name.upper()
        host, port = ConfigManager(self.service_name).discover_service(
            service_name=self.service_name,
            default_host="localhost",
            default_port=self.default_port or 8000,
            env_host_key=self.env_host_key or f"{prefix}_HOST",
            env_port_key=self.env_port_key or f"{prefix}_PORT",
        )
        return f"http://{host}:{port}"

    def _build_default_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "User-Agent": f"collaboration-internal-client/{self.service_name}",
        }

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()
        logger.debug(f"Closed {self.service_name} client")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ========================================
    # HTTP helpers
    # ========================================

    async def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        return await self.client.get(url, params=params, headers=headers)

    async def post(
        self,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        return await self.client.post(url, json=json, headers=headers)

    async def health_check(self) -> bool:
        """Return True when the peer answers /health with 200"""
        try:
            response = await self.get("/health")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(f"{self.service_name} health check failed: {e}")
            return False


__all__ = ["BaseServiceClient"]
