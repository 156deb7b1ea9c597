import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def _clear_cache():
    # Cached stats must not leak between tests sharing the locmem cache
    cache.clear()
    yield
    cache.clear()
