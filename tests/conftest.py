import pytest


@pytest.fixture(autouse=True)
def isolate_github_token(monkeypatch):
    """Keep a real ``GITHUB_TOKEN`` from leaking into CLI tests.

    The CLI reads the token from the environment when ``--token`` is not
    given; tests must never authenticate against GitHub.
    """
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    yield
