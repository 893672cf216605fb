from __future__ import annotations

import pytest

from publication_collector.registry import PublicationRegistry


@pytest.fixture
def registry() -> PublicationRegistry:
    return PublicationRegistry()
