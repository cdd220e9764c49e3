from redis.asyncio import Redis

# Global Redis client instance, set during application startup
redis_client: Redis | None = None
