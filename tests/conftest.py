import pytest

from skillfinder.config import SearchSettings


@pytest.fixture
def settings() -> SearchSettings:
    return SearchSettings()
