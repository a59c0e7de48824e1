"""
pytest configuration and fixtures for Quote API tests
"""

import json
import random
import shutil
import sys
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from api.app import create_app
from store import QueryEngine, QuoteStore
from utils.config_manager import UnifiedConfigManager


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files"""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)


@pytest.fixture
def sample_quotes():
    """Small fixed collection covering every filter dimension"""
    return [
        {
            # Stored length is trusted even though the content is 53 characters
            "_id": "q1",
            "content": "The only way to do great work is to love what you do.",
            "author": "Steve Jobs",
            "tags": ["work", "passion"],
            "length": 49,
            "dateAdded": "2023-01-01",
        },
        {
            "_id": "q2",
            "content": "Life is what happens when you're busy making other plans.",
            "author": "John Lennon",
            "tags": ["life", "Famous-Quotes"],
            "length": 57,
            "dateAdded": "2023-01-15",
        },
        {
            "_id": "q3",
            "content": "The future belongs to those who believe in the beauty of their dreams.",
            "author": "Eleanor Roosevelt",
            "tags": ["inspirational", "dreams"],
            "length": 70,
            "dateAdded": "2023-03-02",
        },
        {
            "_id": "q4",
            "content": "Whoever is happy will make others happy too.",
            "author": "Anne Frank",
            "tags": ["happiness", "Life"],
            "length": 44,
            "dateAdded": "2024-02-10",
        },
        {
            "_id": "q5",
            "content": "Simplicity is the ultimate sophistication.",
            "author": "Leonardo da Vinci",
            "tags": ["wisdom"],
            "length": 42,
            "dateAdded": "2024-02-28",
        },
        {
            "_id": "q6",
            "content": "Well done is better than well said.",
            "author": "Benjamin Franklin",
            "tags": ["work", "Wisdom"],
            "length": 35,
            "dateAdded": "2024-05-17",
        },
    ]


@pytest.fixture
def quote_store(sample_quotes):
    """In-memory store built from the sample collection"""
    return QuoteStore.from_records(sample_quotes, source="fixture")


@pytest.fixture
def query_engine(quote_store):
    """Query engine with a seeded random source"""
    return QueryEngine(quote_store, rng=random.Random(42))


@pytest.fixture
def write_json(temp_dir):
    """Write a JSON payload into the temporary directory and return its path"""
    def _write(name, payload):
        path = temp_dir / name
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(payload, f)
        return path
    return _write


@pytest.fixture
def make_settings(temp_dir):
    """Build an isolated configuration manager (no environment overrides)"""
    def _make(**sections):
        config_dir = temp_dir / "config"
        config_dir.mkdir(exist_ok=True)
        config = {
            "app_config": {"name": "Quote API", "env": "test", "version": "v1"},
            "api_config": {"prefix": "/api"},
            "rate_limit_config": {"enabled": False},
            "security_config": {"headers_enabled": False},
        }
        for section, values in sections.items():
            config.setdefault(section, {}).update(values)
        with open(config_dir / "app.json", 'w', encoding='utf-8') as f:
            json.dump(config, f)
        return UnifiedConfigManager(config_dir=str(config_dir), use_env=False)
    return _make


@pytest.fixture
def test_settings(make_settings):
    """Default test configuration"""
    return make_settings()


@pytest.fixture
def make_client(make_settings, quote_store, query_engine):
    """Create a test client for an app configured with the given sections"""
    def _make(store=None, engine=None, **sections):
        if store is None:
            store, engine = quote_store, engine or query_engine
        app = create_app(settings=make_settings(**sections), store=store, engine=engine)
        return TestClient(app)
    return _make


@pytest.fixture
def client(make_client):
    """Test client over the sample collection"""
    return make_client()


# Pytest configuration
def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
