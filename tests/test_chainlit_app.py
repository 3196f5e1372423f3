import asyncio
import importlib.util
from pathlib import Path
from types import SimpleNamespace

import pytest

pytest.importorskip("chainlit")

APP_PATH = Path(__file__).resolve().parent.parent / "interfaces" / "web_chat" / "chainlit_app.py"


@pytest.fixture
def web_chat(monkeypatch):
    """Load the Chainlit app with cl.Message swapped for a recorder."""
    spec = importlib.util.spec_from_file_location("calcbot_web_chat", APP_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    sent = []

    class RecordingMessage:
        def __init__(self, content):
            self.content = content

        async def send(self):
            sent.append(self.content)
            return self

    monkeypatch.setattr(module.cl, "Message", RecordingMessage)
    module.sent = sent
    return module


def test_chat_start_sends_welcome(web_chat):
    asyncio.run(web_chat.start())
    assert web_chat.sent == [web_chat.START_TEXT]


def test_expression_is_answered(web_chat):
    asyncio.run(web_chat.main(SimpleNamespace(content=" 2 ^ 3 ")))
    assert web_chat.sent == ["✅ Result: 8"]


def test_empty_message_is_ignored(web_chat):
    asyncio.run(web_chat.main(SimpleNamespace(content="   ")))
    assert web_chat.sent == []
