# backend/tools/calculator.py
import re
import operator
import logging
from enum import Enum
from typing import Callable, Dict, List, Tuple

import numpy as np

logger = logging.getLogger("calcbot.calculator")

MAX_EXPRESSION_LENGTH = 100

# Digits, the operator symbols, parentheses, the decimal point and whitespace.
# Parentheses are accepted here even though the tokenizer cannot use them.
_VALID_CHARS = re.compile(r"^[0-9+\-*/×÷^%().\s]+$", re.ASCII)
_WHITESPACE = re.compile(r"\s+", re.ASCII)
_NUMBER = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)$")

_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63


class ErrorKind(str, Enum):
    TOO_LONG = "TooLong"
    EMPTY = "Empty"
    INVALID_CHARACTERS = "InvalidCharacters"
    NO_OPERATOR_FOUND = "NoOperatorFound"
    UNSUPPORTED_OPERATOR = "UnsupportedOperator"
    DIVISION_BY_ZERO = "DivisionByZero"
    RESULT_TOO_LARGE = "ResultTooLarge"
    RESULT_NOT_A_NUMBER = "ResultNotANumber"


class CalculationError(ValueError):
    """Classified, non-fatal failure of a single calculation."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class Operator(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    POWER = "power"
    MODULO = "modulo"


SYMBOLS: Dict[str, Operator] = {
    "+": Operator.ADD,
    "-": Operator.SUBTRACT,
    "*": Operator.MULTIPLY,
    "×": Operator.MULTIPLY,
    "/": Operator.DIVIDE,
    "÷": Operator.DIVIDE,
    "^": Operator.POWER,
    "**": Operator.POWER,
    "%": Operator.MODULO,
}

# Scan order: two-character symbols before their one-character prefixes,
# multiplicative symbols before the additive ones that double as signs.
PRIORITY: List[str] = ["**", "÷", "×", "^", "%", "/", "*", "+", "-"]

_SIGN_SYMBOLS = ("+", "-")


# ---------------------------
# Operation table
# ---------------------------

def _divide(a: float, b: float) -> float:
    if b == 0:
        raise CalculationError(ErrorKind.DIVISION_BY_ZERO, "division by zero")
    return a / b


def _power(a: float, b: float) -> float:
    # IEEE semantics: overflow gives inf, a negative base with a
    # fractional exponent gives nan. Both are classified afterwards.
    with np.errstate(all="ignore"):
        return float(np.power(np.float64(a), np.float64(b)))


def _modulo(a: float, b: float) -> float:
    if b == 0:
        raise CalculationError(
            ErrorKind.DIVISION_BY_ZERO, "division by zero while computing remainder"
        )
    return float(np.fmod(np.float64(a), np.float64(b)))


OPERATIONS: Dict[Operator, Callable[[float, float], float]] = {
    Operator.ADD: operator.add,
    Operator.SUBTRACT: operator.sub,
    Operator.MULTIPLY: operator.mul,
    Operator.DIVIDE: _divide,
    Operator.POWER: _power,
    Operator.MODULO: _modulo,
}


# ---------------------------
# Pipeline stages
# ---------------------------

def validate(expr: str) -> None:
    if len(expr) > MAX_EXPRESSION_LENGTH:
        raise CalculationError(
            ErrorKind.TOO_LONG,
            f"expression is too long (maximum {MAX_EXPRESSION_LENGTH} characters)",
        )

    if not expr.strip():
        raise CalculationError(ErrorKind.EMPTY, "empty expression")

    if not _VALID_CHARS.match(expr):
        logger.warning(f"Blocked expression with invalid characters: {expr!r}")
        raise CalculationError(
            ErrorKind.INVALID_CHARACTERS, "expression contains invalid characters"
        )


def _parse_number(literal: str):
    """Return the literal as a float, or None when it is not a plain decimal."""
    if not _NUMBER.match(literal):
        return None
    try:
        return float(literal)
    except (ValueError, OverflowError):
        return None


def _split(expr: str, idx: int, symbol: str):
    left, right = expr[:idx], expr[idx + len(symbol):]
    if not left or not right:
        return None
    a = _parse_number(left)
    b = _parse_number(right)
    if a is None or b is None:
        return None
    return a, b


def tokenize(expr: str) -> Tuple[float, str, float]:
    """
    Splits an expression into (left operand, operator symbol, right operand).

    Symbols are tried in PRIORITY order and the first structural match wins.
    '+' and '-' only count as the binary operator when the character before
    them is a digit or ')', so leading signs and signs right after another
    operator stay attached to their operand ('-5+3', '2*-3').
    """
    expr = _WHITESPACE.sub("", expr)

    for symbol in PRIORITY:
        if symbol in _SIGN_SYMBOLS:
            for i in range(1, len(expr)):
                if expr[i] != symbol:
                    continue
                prev = expr[i - 1]
                if not ("0" <= prev <= "9" or prev == ")"):
                    continue
                operands = _split(expr, i, symbol)
                if operands:
                    return operands[0], symbol, operands[1]
        else:
            idx = expr.find(symbol)
            if idx > 0:
                operands = _split(expr, idx, symbol)
                if operands:
                    return operands[0], symbol, operands[1]

    raise CalculationError(
        ErrorKind.NO_OPERATOR_FOUND, "operation not found or invalid format"
    )


def evaluate(left: float, symbol: str, right: float) -> float:
    op = SYMBOLS.get(symbol)
    if op is None:
        raise CalculationError(
            ErrorKind.UNSUPPORTED_OPERATOR, f"unsupported operation: {symbol}"
        )

    result = OPERATIONS[op](left, right)

    if np.isinf(result):
        raise CalculationError(ErrorKind.RESULT_TOO_LARGE, "result is too large")
    if np.isnan(result):
        raise CalculationError(ErrorKind.RESULT_NOT_A_NUMBER, "result is not a number")

    return result


def format_result(result: float) -> str:
    # Integral values inside the int64 range print without a decimal point.
    # int() drops the sign of -0.0, so '0*-5' prints '0' rather than '-0'.
    if float(result).is_integer() and _INT64_MIN <= result < _INT64_MAX:
        return str(int(result))
    return "%.6g" % result


def calculate(expression: str) -> str:
    """
    Evaluates a two-operand arithmetic expression such as '2 + 3' or '2 ** 10'.

    Returns the formatted result. Raises CalculationError with the kind of
    the first failing stage (validation, tokenizing or evaluation).
    """
    logger.info(f"Calculating math expression: {expression!r}")

    validate(expression)
    left, symbol, right = tokenize(expression)
    result = evaluate(left, symbol, right)
    return format_result(result)
