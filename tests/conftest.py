import pytest
from unittest.mock import AsyncMock, MagicMock


class _ResponseContext:
    def __init__(self, response):
        self.response = response

    async def __aenter__(self):
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession and replays queued responses."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def __call__(self, *args, **kwargs):
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return _ResponseContext(self.responses.pop(0))

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)


def make_response(status=200, json_data=None, text="", reason="OK"):
    response = MagicMock()
    response.status = status
    response.reason = reason
    response.json = AsyncMock(return_value=json_data)
    response.text = AsyncMock(return_value=text)
    return response


@pytest.fixture
def fake_session():
    """Factory building a FakeSession from (status, json) tuples or exceptions."""

    def _build(*responses):
        built = []
        for item in responses:
            if isinstance(item, Exception):
                built.append(item)
            else:
                status, data = item
                built.append(make_response(status=status, json_data=data, text=str(data)))
        return FakeSession(built)

    return _build


@pytest.fixture
def mock_settings():
    """Settings for testing, isolated from any local .env file."""
    from articlebot.models.settings import Settings

    return Settings(
        _env_file=None,
        openai_api_key="test_key",
        github_token="test_token",
        github_repo="octo/blog",
        github_branch="main",
    )
