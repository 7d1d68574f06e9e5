"""Redis service for login attempt throttling"""

import redis.asyncio as redis
from typing import Optional
from atelier.config import settings


class RedisService:
    """Service for Redis operations including failed-login counters"""

    _client: Optional[redis.Redis] = None

    @classmethod
    async def get_client(cls) -> redis.Redis:
        """Get or create Redis client"""
        if cls._client is None:
            cls._client = redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True
            )
        return cls._client

    @classmethod
    async def close(cls):
        """Close Redis connection"""
        if cls._client:
            await cls._client.aclose()
            cls._client = None

    async def ping(self) -> bool:
        client = await self.get_client()
        return await client.ping()

    async def increment_login_attempts(self, ip_address: str) -> int:
        """
        Increment failed login attempts for an IP address

        Args:
            ip_address: IP address to track

        Returns:
            Current number of attempts
        """
        client = await self.get_client()
        key = f"login_attempts:{ip_address}"
        count = await client.incr(key)

        # Start the window on the first failure
        if count == 1:
            await client.expire(key, settings.login_attempt_window_seconds)

        return count

    async def reset_login_attempts(self, ip_address: str):
        """
        Reset failed login attempts for an IP address

        Args:
            ip_address: IP address to reset
        """
        client = await self.get_client()
        key = f"login_attempts:{ip_address}"
        await client.delete(key)

    async def get_login_attempts(self, ip_address: str) -> int:
        """
        Get current failed login attempts for an IP address

        Args:
            ip_address: IP address to check

        Returns:
            Number of failed attempts
        """
        client = await self.get_client()
        key = f"login_attempts:{ip_address}"
        result = await client.get(key)
        return int(result) if result else 0


def get_redis_service() -> RedisService:
    """FastAPI dependency returning the Redis service"""
    return RedisService()
