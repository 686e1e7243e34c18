import json
from pathlib import Path

import httpx
import pytest

from skein.api.client import RegistryClient
from skein.api.config import ConfigManager
from skein.core.project import Project

INDEX_URL = "https://registry.example/plugins.yml"
EXEC_URL = "https://example.org/berry/master/packages/plugin-exec/bin/%40yarnpkg/plugin-exec.js"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Keep the user's configuration and environment out of the tests"""
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_PATH",
                        tmp_path_factory.mktemp("home") / "config.toml")
    for name in ("SKEIN_INDEX_URL", "SKEIN_TIMEOUT", "SKEIN_SANDBOX_TIMEOUT", "SKEIN_CONFIG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project_dir(tmp_path) -> Path:
    """Empty project with a package.json"""
    root = tmp_path / "project"
    root.mkdir()
    (root / "package.json").write_text(json.dumps({"name": "demo"}))
    return root


@pytest.fixture
def project(project_dir) -> Project:
    return Project.find(project_dir)


@pytest.fixture
def routes() -> dict:
    """
    URL to response table served by the mock transport

    Values are either bytes (200 response) or an int status code.
    """
    return {}


@pytest.fixture
def requests_seen() -> list:
    return []


@pytest.fixture
def transport(routes, requests_seen) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        url = next((key for key in routes if httpx.URL(key) == request.url), str(request.url))
        requests_seen.append(url)
        if url not in routes:
            return httpx.Response(404, text="not found")
        response = routes[url]
        if isinstance(response, int):
            return httpx.Response(response, text=f"status {response}")
        return httpx.Response(200, content=response)

    return httpx.MockTransport(handler)


@pytest.fixture
def client(transport) -> RegistryClient:
    return RegistryClient(index_url=INDEX_URL, transport=transport)
