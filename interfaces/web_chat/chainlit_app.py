"""
CalcBot: Web Chat Interface
Run with: chainlit run interfaces/web_chat/chainlit_app.py -w --port 8001
"""
import os
import sys
import logging

import chainlit as cl

# --- Path Setup so the backend package resolves when run via `chainlit run` ---
current_dir = os.path.dirname(os.path.abspath(__file__))
root_dir = os.path.abspath(os.path.join(current_dir, "..", ".."))

if root_dir not in sys.path:
    sys.path.insert(0, root_dir)

from backend.bot.replies import START_TEXT, build_reply  # noqa: E402

logger = logging.getLogger("calcbot.web_chat")

# --- Chainlit Handlers ---

@cl.on_chat_start
async def start():
    await cl.Message(content=START_TEXT).send()

@cl.on_message
async def main(message: cl.Message):
    user_text = message.content.strip()
    if not user_text:
        return

    logger.info(f"User (Web): {user_text}")
    await cl.Message(content=build_reply(user_text)).send()
