"""Shared fixtures: isolated config, a file-backed SQLite database, the app."""

import pytest
from sqlalchemy.orm import Session

from blog_aggregator.config import (
    Config,
    DatabaseConfig,
    LoggingConfig,
    SchedulerConfig,
    WebConfig,
    set_config,
)
from blog_aggregator.storage.database import DatabaseManager
from blog_aggregator.web.app import create_app


@pytest.fixture(autouse=True)
def test_config(tmp_path):
    """Install a config that never touches the working directory."""
    config = Config(
        database=DatabaseConfig(type="sqlite", path=str(tmp_path / "test.db"), url=None),
        scheduler=SchedulerConfig(
            interval_seconds=60, batch_size=10, stale_after_seconds=3600, max_workers=1
        ),
        logging=LoggingConfig(file_enabled=False, file_path=str(tmp_path / "logs" / "test.log")),
        web=WebConfig(port=8080, default_posts_limit=10),
    )
    set_config(config)
    yield config
    set_config(None)


@pytest.fixture
def db_manager(test_config):
    """Create a test database manager with all tables created."""
    manager = DatabaseManager(db_config=test_config.database)
    manager.init_db()
    yield manager
    manager.close()


@pytest.fixture
def db_session(db_manager: DatabaseManager) -> Session:
    """Create a test database session."""
    with db_manager.session() as session:
        yield session


@pytest.fixture
def app(test_config, db_manager):
    app = create_app(config=test_config, db_manager=db_manager)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def create_user(client):
    """Register a user through the API and return its JSON body."""

    def _create_user(name: str = "alice") -> dict:
        response = client.post("/v1/users", json={"name": name})
        assert response.status_code == 201
        return response.get_json()

    return _create_user


def auth_header(api_key: str) -> dict:
    return {"Authorization": f"ApiKey {api_key}"}


@pytest.fixture
def create_feed(client):
    """Create a feed through the API as the given user."""

    def _create_feed(user: dict, name: str = "Boot.dev", url: str = "https://blog.boot.dev/index.xml") -> dict:
        response = client.post(
            "/v1/feeds", json={"name": name, "url": url}, headers=auth_header(user["api_key"])
        )
        assert response.status_code == 201
        return response.get_json()

    return _create_feed
