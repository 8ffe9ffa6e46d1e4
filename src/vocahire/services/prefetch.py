"""Connection warm-up run before a user starts an interview."""

import asyncio
import logging
import time

from ..errors import PrefetchTimeout
from ..models.realtime import PrefetchResponse
from .realtime_provider import RealtimeProviderClient
from .session_store import SessionStore

logger = logging.getLogger(__name__)


async def _warm_provider(provider: RealtimeProviderClient) -> bool:
    try:
        return await provider.ping()
    except Exception as e:
        logger.warning(f"[Prefetch] Provider warm-up failed: {e}")
        return False


async def _warm_store(store: SessionStore) -> bool:
    try:
        return await asyncio.to_thread(store.warm)
    except Exception as e:
        logger.warning(f"[Prefetch] Session store warm-up failed: {e}")
        return False


async def prefetch(
    provider: RealtimeProviderClient,
    store: SessionStore,
    timeout: float = 20.0,
) -> PrefetchResponse:
    """Warm the provider connection and the store in parallel, bounded by ``timeout``."""
    start = time.monotonic()
    try:
        provider_warmed, store_warmed = await asyncio.wait_for(
            asyncio.gather(_warm_provider(provider), _warm_store(store)),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        logger.error(f"[Prefetch] Timed out after {timeout}s")
        raise PrefetchTimeout("Prefetch timeout") from e

    elapsed_ms = int((time.monotonic() - start) * 1000)
    logger.info(
        f"[Prefetch] Completed in {elapsed_ms}ms - Provider: {provider_warmed}, Store: {store_warmed}"
    )
    return PrefetchResponse(
        provider_warmed=provider_warmed,
        store_warmed=store_warmed,
        time_ms=elapsed_ms,
    )
