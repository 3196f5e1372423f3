import pytest


# -------- Global markers registration --------
def pytest_configure(config):
    config.addinivalue_line("markers", "integration: integration-level test")
    config.addinivalue_line("markers", "slow: slow-running test")


# -------- Shared fixtures --------
class FakeTelegramClient:
    """Records replies instead of calling the Bot API."""

    def __init__(self, batches=None, send_error=None):
        self.batches = list(batches or [])
        self.send_error = send_error
        self.sent = []
        self.offsets = []

    async def get_updates(self, offset=None, timeout=60):
        self.offsets.append(offset)
        if not self.batches:
            return []
        batch = self.batches.pop(0)
        if isinstance(batch, Exception):
            raise batch
        return batch

    async def send_message(self, chat_id, text, reply_to_message_id=None):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(
            {"chat_id": chat_id, "text": text, "reply_to_message_id": reply_to_message_id}
        )
        return {"message_id": len(self.sent)}


@pytest.fixture
def fake_client():
    return FakeTelegramClient()


@pytest.fixture
def make_message():
    """Build a Bot API message dict."""

    def _make(text, chat_id=42, message_id=7):
        return {"message_id": message_id, "chat": {"id": chat_id}, "text": text}

    return _make


@pytest.fixture
def client_factory():
    """Return the fake client class so tests can script update batches."""
    return FakeTelegramClient
