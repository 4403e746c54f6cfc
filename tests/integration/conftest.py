# tests/integration/conftest.py — v1
"""Shared fixtures for integration tests.

Redis runs in a session-scoped testcontainers container and is skipped when
no Docker daemon is reachable. The container is addressed through its
bridge network IP, which also works from inside a devcontainer using the
host's Docker socket.
"""

from __future__ import annotations

import logging
import time
import uuid

import pytest
import pytest_asyncio

logger = logging.getLogger(__name__)

REDIS_IMAGE = "redis:7-alpine"
REDIS_INTERNAL_PORT = 6379


def pytest_configure(config):
    config.addinivalue_line("markers", "redis: marks tests requiring Redis container")


def _get_container_bridge_ip(container, max_attempts: int = 10) -> str:
    """Get container bridge network IP with retries."""
    for attempt in range(max_attempts):
        try:
            wrapped = container.get_wrapped_container()
            wrapped.reload()
            networks = wrapped.attrs.get("NetworkSettings", {}).get("Networks", {})
            for net_name, net_info in networks.items():
                ip = net_info.get("IPAddress", "")
                if ip:
                    logger.info("Container %s IP: %s (network: %s)", wrapped.short_id, ip, net_name)
                    return ip
        except Exception as e:
            logger.debug("Error getting IP (attempt %d): %s", attempt + 1, e)
        time.sleep(0.5)

    raise RuntimeError(
        f"Could not obtain container bridge IP after {max_attempts} attempts"
    )


def _docker_available() -> bool:
    """Check if Docker daemon is reachable."""
    try:
        import docker
        client = docker.from_env()
        client.ping()
        return True
    except Exception:
        return False


@pytest.fixture(scope="session")
def redis_container():
    if not _docker_available():
        pytest.skip("Docker not available")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = DockerContainer(REDIS_IMAGE).with_exposed_ports(REDIS_INTERNAL_PORT)
    container.start()
    wait_for_logs(container, predicate=r"Ready to accept connections", timeout=30)

    ip = _get_container_bridge_ip(container)
    logger.info("Redis ready at %s:%d", ip, REDIS_INTERNAL_PORT)
    yield f"redis://{ip}:{REDIS_INTERNAL_PORT}/0"
    container.stop()


@pytest_asyncio.fixture
async def redis_cache(redis_container):
    """Fresh logical database per test, flushed before and after."""
    from trackgen.cache.redis_cache import RedisLookasideCache

    cache = RedisLookasideCache(redis_url=redis_container)
    await cache._client.flushdb()
    yield cache
    await cache._client.flushdb()
    await cache.aclose()


@pytest.fixture
def sqlite_path(tmp_path):
    return tmp_path / f"tracking_{uuid.uuid4().hex[:8]}.db"
