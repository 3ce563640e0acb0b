from types import SimpleNamespace

import httpx
import pytest

_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def make_message(*texts, input_tokens=12, output_tokens=34, extra_blocks=()):
    """Build an object shaped like anthropic.types.Message."""
    content = [SimpleNamespace(type="text", text=t) for t in texts]
    content.extend(extra_blocks)
    return SimpleNamespace(
        content=content,
        usage=SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens),
    )


class FakeMessages:
    def __init__(self, responses):
        # Each response is either a message object or an exception to raise.
        self._responses = list(responses)
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeAnthropic:
    def __init__(self, *responses):
        self.messages = FakeMessages(responses)


@pytest.fixture
def message():
    return make_message


@pytest.fixture
def fake_anthropic():
    return FakeAnthropic


@pytest.fixture
def api_status_error():
    import anthropic

    classes = {
        400: anthropic.BadRequestError,
        401: anthropic.AuthenticationError,
        429: anthropic.RateLimitError,
        500: anthropic.InternalServerError,
    }

    def _make(status: int, message: str = "error"):
        cls = classes.get(status, anthropic.APIStatusError)
        response = httpx.Response(status, request=_REQUEST)
        return cls(message, response=response, body=None)

    return _make


@pytest.fixture
def api_timeout_error():
    import anthropic

    def _make():
        return anthropic.APITimeoutError(request=_REQUEST)

    return _make


@pytest.fixture
def api_connection_error():
    import anthropic

    def _make():
        return anthropic.APIConnectionError(request=_REQUEST)

    return _make


@pytest.fixture
def no_sleep(monkeypatch):
    monkeypatch.setattr("simcase.llm._retry.time.sleep", lambda _s: None)
    monkeypatch.setattr("simcase.llm._retry.random.random", lambda: 0.0)
