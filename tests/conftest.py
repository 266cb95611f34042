"""Pytest configuration and shared fixtures for mini-s3 tests."""

import shutil
import tempfile
from pathlib import Path

import pytest
import structlog
from prometheus_client import CollectorRegistry

from mini_s3.adapters.outbound.local_storage import LocalStorage
from mini_s3.domain.services.checksum_service import ChecksumService
from mini_s3.infrastructure import config as config_module
from mini_s3.infrastructure.config import Config, StorageConfig
from mini_s3.infrastructure.metrics import StorageMetrics


@pytest.fixture(autouse=True)
def isolate_environment(tmp_path, monkeypatch):
    """Keep tests away from the real home config and reset logging."""
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_FILE", tmp_path / "home" / ".mini-s3.yaml")
    (tmp_path / "home").mkdir()
    config_module.get_config.cache_clear()
    yield
    config_module.get_config.cache_clear()
    structlog.reset_defaults()


@pytest.fixture
def temp_data_dir():
    """Create a temporary data directory for tests."""
    temp_dir = tempfile.mkdtemp(prefix="mini_s3_test_")
    yield Path(temp_dir)
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def test_config(temp_data_dir) -> Config:
    """Provide a test configuration rooted in a temp directory."""
    return Config(storage=StorageConfig(data_dir=str(temp_data_dir), sync_writes=False))


@pytest.fixture
def registry() -> CollectorRegistry:
    """Provide an isolated Prometheus registry."""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry) -> StorageMetrics:
    """Provide metrics bound to an isolated registry."""
    return StorageMetrics(registry=registry)


@pytest.fixture
def checksum_service() -> ChecksumService:
    """Provide the default SHA-256 checksum service."""
    return ChecksumService()


@pytest.fixture
def storage(temp_data_dir, checksum_service, metrics) -> LocalStorage:
    """Provide a storage engine over a temp directory."""
    return LocalStorage(
        root=temp_data_dir,
        checksum=checksum_service,
        chunk_size=4096,
        pipe_depth=4,
        metrics=metrics,
    )


@pytest.fixture
def sample_object_data():
    """Provide sample object data for testing."""
    return b"Hello, World! This is test data for the object store."


@pytest.fixture
def large_object_data():
    """Provide larger object data spanning many chunks."""
    return bytes(range(256)) * (4 * 1024 * 10)  # 10 MB


# Pytest markers
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
