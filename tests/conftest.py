import pytest
from structlog.testing import capture_logs


@pytest.fixture(autouse=True)
def captured_logs():
    """Route structlog events into a list instead of stdout."""
    with capture_logs() as logs:
        yield logs
