# Test configuration
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).parent.parent

# Add repo root to path so tests can import modules
sys.path.insert(0, str(REPO_ROOT))

from api_wrapper.catalog.config import CatalogConfig, parse_catalog  # noqa: E402


def build_catalog(tools: list[dict], token_env_var: str = "TEST_TOKEN") -> CatalogConfig:
    return parse_catalog(
        {
            "server": {"name": "Test API Gateway", "version": "1.0.0"},
            "auth": {"token_env_var": token_env_var},
            "tools": tools,
        }
    )


@pytest.fixture
def sample_catalog() -> CatalogConfig:
    return build_catalog(
        [
            {
                "name": "test-get",
                "description": "Test GET endpoint",
                "endpoint": "http://upstream.test/api/test",
                "method": "GET",
                "timeout": 10,
                "query_params": {"param1": "{{value1}}", "param2": "{{value2}}"},
                "parameters": {
                    "value1": {"type": "string", "description": "First parameter", "required": True},
                    "value2": {"type": "number", "description": "Second parameter", "default": 42},
                },
            },
            {
                "name": "test-post",
                "description": "Test POST endpoint",
                "endpoint": "http://upstream.test/api/post",
                "method": "POST",
                "timeout": 20,
                "template": '{"name":"{{name}}","count":{{count}}}',
                "parameters": {
                    "name": {"type": "string", "description": "Name", "required": True},
                    "count": {"type": "number", "description": "Count", "default": 1},
                },
            },
        ]
    )


@pytest.fixture
def make_catalog():
    return build_catalog
