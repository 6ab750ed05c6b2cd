"""Free-text transaction parsing.

Turns chat lines such as ``"10.12 $ Food"``, ``"10,50 EUR Coffee"`` or
``"25 Freelance"`` into an amount, an ISO 4217 currency code (when one is
given) and a descriptive name. Unparseable input yields an empty
:class:`ParsedTransaction` rather than an exception.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from decimal import Decimal

logger = logging.getLogger(__name__)

CURRENCY_SYMBOL_MAP: dict[str, str] = {
    "$": "USD",
    "€": "EUR",
    "£": "GBP",
    "¥": "JPY",
    "₹": "INR",
    "₽": "RUB",
    "₺": "TRY",
    "zł": "PLN",
    "kr": "SEK",  # also NOK/DKK, always read as SEK
    "R$": "BRL",
    "C$": "CAD",
    "A$": "AUD",
    "MX$": "MXN",
    "S$": "SGD",
    "HK$": "HKD",
}

# Active ISO 4217 codes, accepted in any letter case. Other 3-letter tokens
# only count as a currency when written in uppercase.
ISO_CURRENCY_CODES = frozenset(
    """
    AED AFN ALL AMD ANG AOA ARS AUD AWG AZN BAM BBD BDT BGN BHD BIF BMD BND BOB BOV
    BRL BSD BTN BWP BYN BZD CAD CDF CHE CHF CHW CLF CLP CNY COP COU CRC CUC CUP CVE
    CZK DJF DKK DOP DZD EGP ERN ETB EUR FJD FKP GBP GEL GHS GIP GMD GNF GTQ GYD HKD
    HNL HTG HUF IDR ILS INR IQD IRR ISK JMD JOD JPY KES KGS KHR KMF KPW KRW KWD KYD
    KZT LAK LBP LKR LRD LSL LYD MAD MDL MGA MKD MMK MNT MOP MRU MUR MVR MWK MXN MXV
    MYR MZN NAD NGN NIO NOK NPR NZD OMR PAB PEN PGK PHP PKR PLN PYG QAR RON RSD RUB
    RWF SAR SBD SCR SDG SEK SGD SHP SLE SLL SOS SRD SSP STN SVC SYP SZL THB TJS TMT
    TND TOP TRY TTD TWD TZS UAH UGX USD USN UYI UYU UYW UZS VED VES VND VUV WST XAF
    XAG XAU XCD XCG XDR XOF XPD XPF XPT XSU XUA YER ZAR ZMW ZWG ZWL
    """.split()
)

_SYMBOL_LOOKUP = {symbol.upper(): code for symbol, code in CURRENCY_SYMBOL_MAP.items()}

_by_length = sorted(CURRENCY_SYMBOL_MAP, key=len, reverse=True)
_SIGN_PATTERN = "|".join(re.escape(symbol) for symbol in _by_length if not symbol.isalpha())
_WORD_PATTERN = "|".join([*(re.escape(symbol) for symbol in _by_length if symbol.isalpha()), r"[A-Za-z]{3}"])

_PLAIN_RE = re.compile(r"^(?P<amount>[\d.,]+)\s+(?P<name>.+)$", re.DOTALL)
# Alphabetic markers (kr, zł, ISO codes) need whitespace before the name so
# that "10 kraken" never reads as kr + "aken".
_WITH_CURRENCY_RE = re.compile(
    rf"^(?P<amount>[\d.,]+)\s*(?:(?P<sign>{_SIGN_PATTERN})\s*|(?P<word>{_WORD_PATTERN})\s+)(?P<name>.+)$",
    re.IGNORECASE | re.DOTALL,
)
_CURRENCY_PREFIX_RE = re.compile(
    rf"^(?:(?P<sign>{_SIGN_PATTERN})|(?P<word>{_WORD_PATTERN})(?=\s|$))",
    re.IGNORECASE,
)
_NUMBER_PREFIX_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")


@dataclass(frozen=True, slots=True)
class ParsedTransaction:
    amount: float | None = None
    currency_code: str | None = None
    name: str | None = None

    def __bool__(self) -> bool:
        return self.amount is not None and bool(self.name)


EMPTY = ParsedTransaction()


def _parse_amount(raw: str) -> float | None:
    # The first comma acts as the decimal point; anything after the leading
    # number is ignored, so "1,234.50" reads as 1.234.
    normalized = raw.replace(",", ".", 1)
    match = _NUMBER_PREFIX_RE.match(normalized)
    if not match:
        return None
    value = float(match.group(0))
    if not math.isfinite(value):
        return None
    return value


def _currency_for_word(token: str) -> str | None:
    upper = token.upper()
    if upper in _SYMBOL_LOOKUP:
        return _SYMBOL_LOOKUP[upper]
    if token.isupper() or upper in ISO_CURRENCY_CODES:
        return upper
    return None


def _starts_with_currency(text: str) -> bool:
    match = _CURRENCY_PREFIX_RE.match(text)
    if not match:
        return False
    if match.group("sign"):
        return True
    return _currency_for_word(match.group("word")) is not None


def _build(amount_raw: str, currency_code: str | None, name_raw: str) -> ParsedTransaction:
    amount = _parse_amount(amount_raw)
    name = name_raw.strip()
    if amount is None or not name:
        return EMPTY
    return ParsedTransaction(amount=amount, currency_code=currency_code, name=name)


def _parse_with_currency(text: str) -> ParsedTransaction:
    match = _WITH_CURRENCY_RE.match(text)
    if not match:
        return EMPTY
    if match.group("sign"):
        code = _SYMBOL_LOOKUP[match.group("sign").upper()]
    else:
        code = _currency_for_word(match.group("word"))
        if code is None:
            return EMPTY
    return _build(match.group("amount"), code, match.group("name"))


def parse_transaction_message(message: str) -> ParsedTransaction:
    """Parse ``"<amount> [<currency>] <name>"`` into its parts.

    The plain ``amount name`` shape is tried first. When the text after the
    amount opens with a currency symbol or code, the currency-aware shape is
    used instead so the marker never ends up inside the name.
    """
    text = (message or "").strip()
    if not text:
        return EMPTY

    plain = _PLAIN_RE.match(text)
    if plain and not _starts_with_currency(plain.group("name").strip()):
        result = _build(plain.group("amount"), None, plain.group("name"))
    else:
        result = _parse_with_currency(text)

    if result:
        logger.debug("Parsed %r as %s", text, result)
    else:
        logger.debug("No transaction pattern matched %r", text)
    return result


def format_transaction(parsed: ParsedTransaction) -> str:
    """Render the canonical ``"Amount [CODE] Name"`` line for a parse result."""
    if not parsed:
        raise ValueError("Cannot format an unparsed transaction.")
    amount_text = format(Decimal(repr(parsed.amount)), "f")
    parts = [amount_text]
    if parsed.currency_code:
        parts.append(parsed.currency_code)
    parts.append(parsed.name or "")
    return " ".join(parts)


def split_income_marker(text: str) -> tuple[bool, str]:
    """Strip the leading ``+`` that marks a chat message as income."""
    stripped = (text or "").strip()
    if stripped.startswith("+"):
        return True, stripped[1:].lstrip()
    return False, stripped
