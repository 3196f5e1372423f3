# backend/bot/replies.py
from backend.tools.calculator import CalculationError, calculate

START_TEXT = """👋 Hi! I am a calculator bot.

Supported operations:
• Addition: +
• Subtraction: -
• Multiplication: * or ×
• Division: / or ÷
• Exponentiation: ^ or **
• Remainder: %

Examples:
• 2 + 3
• 10.5 * 2
• 16 / 4
• 2 ^ 3
• 10 % 3

Just send me a math expression!"""

HELP_TEXT = """📖 How to use:

Send an expression in the form: number operation number

Valid examples:
• 15 + 25
• 100 - 50
• 12.5 * 4
• 144 / 12
• 2 ^ 10
• 17 % 5

⚠️ Limits:
• 100 characters at most
• Simple expressions only (two numbers and one operation)
• Division by zero is not allowed"""

COMMANDS = {
    "/start": START_TEXT,
    "/help": HELP_TEXT,
}


def success_reply(result: str) -> str:
    return f"✅ Result: {result}"


def error_reply(message: str) -> str:
    return f"❌ Error: {message}\n\nUse /help for usage instructions."


def build_reply(text: str) -> str:
    """Maps a (trimmed) chat message to the bot's reply text."""
    text = text.strip()

    if text in COMMANDS:
        return COMMANDS[text]

    try:
        result = calculate(text)
    except CalculationError as e:
        return error_reply(e.message)

    return success_reply(result)
