"""Currency conversion service.

Rates are stored only against the base currency ("1 unit of X is worth
rate[X] base units"), so conversion between any two currencies goes
source -> base -> target.
"""

import json
import logging
import math
import re
import time
from dataclasses import dataclass
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Any, Callable, Mapping, Optional

from planner.database.base import Storage
from planner.domain.entities import CurrencyConfig
from planner.domain.errors import StorageError

logger = logging.getLogger(__name__)

STORAGE_KEY = "contentplanner_currency_config"
DEFAULT_BASE_CURRENCY = "HUF"
RATE_MAX_AGE_SECONDS = 24 * 60 * 60

# Currencies conventionally written with the symbol first
PREFIX_SYMBOL_CURRENCIES = frozenset({"USD", "GBP", "CAD", "AUD"})
ZERO_DECIMAL_CURRENCIES = frozenset({"HUF", "JPY"})
AI_RATE_CURRENCIES = ("EUR", "USD", "GBP", "CHF", "PLN", "CZK", "RON")


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    name: str
    symbol: str


AVAILABLE_CURRENCIES = (
    CurrencyInfo("HUF", "Hungarian Forint", "Ft"),
    CurrencyInfo("EUR", "Euro", "€"),
    CurrencyInfo("USD", "US Dollar", "$"),
    CurrencyInfo("GBP", "British Pound", "£"),
    CurrencyInfo("CHF", "Swiss Franc", "Fr"),
    CurrencyInfo("JPY", "Japanese Yen", "¥"),
    CurrencyInfo("PLN", "Polish Zloty", "zł"),
    CurrencyInfo("CZK", "Czech Koruna", "Kč"),
    CurrencyInfo("RON", "Romanian Leu", "lei"),
    CurrencyInfo("RSD", "Serbian Dinar", "дин"),
    CurrencyInfo("HRK", "Croatian Kuna", "kn"),
    CurrencyInfo("UAH", "Ukrainian Hryvnia", "₴"),
    CurrencyInfo("RUB", "Russian Ruble", "₽"),
    CurrencyInfo("TRY", "Turkish Lira", "₺"),
    CurrencyInfo("SEK", "Swedish Krona", "kr"),
    CurrencyInfo("NOK", "Norwegian Krone", "kr"),
    CurrencyInfo("DKK", "Danish Krone", "kr"),
    CurrencyInfo("CAD", "Canadian Dollar", "C$"),
    CurrencyInfo("AUD", "Australian Dollar", "A$"),
    CurrencyInfo("CNY", "Chinese Yuan", "¥"),
    CurrencyInfo("INR", "Indian Rupee", "₹"),
    CurrencyInfo("BRL", "Brazilian Real", "R$"),
    CurrencyInfo("MXN", "Mexican Peso", "$"),
    CurrencyInfo("KRW", "South Korean Won", "₩"),
    CurrencyInfo("THB", "Thai Baht", "฿"),
    CurrencyInfo("IDR", "Indonesian Rupiah", "Rp"),
    CurrencyInfo("AED", "UAE Dirham", "د.إ"),
    CurrencyInfo("SAR", "Saudi Riyal", "﷼"),
)
_CURRENCIES_BY_CODE = {c.code: c for c in AVAILABLE_CURRENCIES}

LANGUAGE_CURRENCY_MAP = {
    "hu": "HUF",
    "en": "USD",
    "de": "EUR",
    "fr": "EUR",
    "es": "EUR",
    "it": "EUR",
    "ro": "RON",
    "sk": "EUR",
    "hr": "EUR",
    "pl": "PLN",
    "cn": "CNY",
    "jp": "JPY",
    "pt": "EUR",
    "tr": "TRY",
    "ar": "SAR",
    "ru": "RUB",
    "hi": "INR",
    "bn": "INR",
    "ur": "PKR",
    "th": "THB",
    "id": "IDR",
    "ko": "KRW",
}

# Value of one unit in HUF
DEFAULT_RATES = {
    "EUR": 386.7,
    "USD": 330.1,
    "GBP": 441.3,
    "CHF": 368.5,
    "JPY": 2.15,
    "PLN": 90.2,
    "CZK": 15.3,
    "RON": 77.7,
    "TRY": 9.5,
    "SEK": 31.5,
    "NOK": 29.8,
    "DKK": 51.8,
    "CAD": 235.4,
    "AUD": 215.2,
    "CNY": 45.3,
    "INR": 3.9,
    "RSD": 3.3,
    "HRK": 51.3,
    "UAH": 8.0,
    "RUB": 3.3,
    "BRL": 55.4,
    "MXN": 16.2,
    "KRW": 0.23,
    "THB": 9.6,
    "IDR": 0.02,
    "AED": 89.9,
    "SAR": 88.0,
}

AskFunction = Callable[[str], str]


@dataclass(frozen=True)
class RateUpdateResult:
    """Outcome of a rate refresh."""

    success: bool
    message: str
    method: str = "ai"
    applied: tuple[str, ...] = ()


def is_rate(value: Any) -> bool:
    """Return True for real numbers (booleans excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_known_currency(code: str) -> bool:
    return code in _CURRENCIES_BY_CODE


def currency_symbol(code: str) -> str:
    info = _CURRENCIES_BY_CODE.get(code)
    return info.symbol if info else code


# Wide enough for every float, including 1e308 with two decimals
_FORMAT_CONTEXT = Context(prec=400, rounding=ROUND_HALF_UP)


def _group_thousands(digits: str) -> str:
    # Hungarian leaves four-digit numbers ungrouped: 3850, but 12 345
    if len(digits) < 5:
        return digits
    head = len(digits) % 3 or 3
    groups = [digits[:head]] + [digits[i:i + 3] for i in range(head, len(digits), 3)]
    return "\u00a0".join(groups)


def format_number(amount: float, decimals: int) -> str:
    """Format with Hungarian conventions: NBSP grouping, decimal comma."""
    if math.isnan(amount):
        return "NaN"
    if math.isinf(amount):
        return "-∞" if amount < 0 else "∞"
    quantum = Decimal(1).scaleb(-decimals)
    rounded = Decimal(str(amount)).quantize(quantum, context=_FORMAT_CONTEXT)
    if rounded == 0:
        rounded = abs(rounded)
    text = f"{rounded:.{decimals}f}"
    sign = "-" if text.startswith("-") else ""
    whole, _, fraction = text.lstrip("-").partition(".")
    formatted = sign + _group_thousands(whole)
    return f"{formatted},{fraction}" if fraction else formatted


class CurrencyService:
    """Base currency, rates to it, conversion and formatting."""

    def __init__(self, storage: Storage, clock: Optional[Callable[[], float]] = None):
        """Initialize the service and load the saved configuration.

        Args:
            storage: Durable storage port
            clock: Optional source of epoch seconds (defaults to time.time)
        """
        self.storage = storage
        self._clock = clock or time.time
        self.config = CurrencyConfig(
            base_currency=DEFAULT_BASE_CURRENCY,
            rates=dict(DEFAULT_RATES),
            last_updated=self._clock(),
        )
        self._load()

    def get_default_currency(self, language: str) -> str:
        return LANGUAGE_CURRENCY_MAP.get(language, "USD")

    def get_base_currency(self) -> str:
        return self.config.base_currency

    def set_base_currency(self, currency: str) -> None:
        self.config = CurrencyConfig(
            base_currency=currency,
            rates=self.config.rates,
            last_updated=self.config.last_updated,
        )
        self._save()

    def get_last_updated(self) -> float:
        return self.config.last_updated

    def set_rate(self, currency: str, rate_to_base: float) -> None:
        """Set how many base units one unit of currency is worth.

        Example: with base HUF, set_rate("EUR", 385) means 1 EUR = 385 HUF.
        The base currency's own rate is always 1 and is not stored.
        """
        if currency == self.config.base_currency:
            logger.debug("Ignoring rate for base currency %s", currency)
            return
        self.config.rates[currency] = rate_to_base
        self._save()

    def get_rate(self, currency: str) -> float:
        if currency == self.config.base_currency:
            return 1
        return self.config.rates.get(currency) or 1

    def get_all_rates(self) -> dict[str, float]:
        return {
            code: rate for code, rate in self.config.rates.items()
            if code != self.config.base_currency
        }

    def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        """Convert amount between two currencies through the base currency.

        Currencies without a rate are treated as already being in the base.
        """
        if from_currency == to_currency:
            return amount

        base = self.config.base_currency
        if from_currency == base:
            in_base = amount
        else:
            in_base = amount * (self.config.rates.get(from_currency) or 1)

        if to_currency == base:
            return in_base
        return in_base / (self.config.rates.get(to_currency) or 1)

    def format(self, amount: float, currency: str) -> str:
        """Format amount with its symbol, prefixed for USD, GBP, CAD and AUD."""
        decimals = 0 if currency in ZERO_DECIMAL_CURRENCIES else 2
        formatted = format_number(amount, decimals)
        symbol = currency_symbol(currency)
        if currency in PREFIX_SYMBOL_CURRENCIES:
            return f"{symbol}{formatted}"
        return f"{formatted} {symbol}"

    def apply_rates(self, rates: Mapping[str, Any]) -> list[str]:
        """Apply externally supplied rates, skipping non-numeric entries.

        Returns:
            Currency codes whose rate was updated
        """
        applied = []
        for currency, rate in rates.items():
            if not is_rate(rate) or currency == self.config.base_currency:
                continue
            self.config.rates[currency] = rate
            applied.append(currency)
        if applied:
            self._save()
        return applied

    def fetch_rates_with_ai(self, ask: AskFunction) -> RateUpdateResult:
        """Ask an AI collaborator for today's rates and apply the numeric ones.

        Args:
            ask: Callable that sends a prompt and returns the model's text answer

        Returns:
            RateUpdateResult describing what was applied
        """
        prompt = (
            f"Give today's ({time.strftime('%Y-%m-%d')}) exchange rates against "
            f"{self.config.base_currency}. Reply with JSON only, for example "
            '{"EUR": 386.7, "USD": 330.1}. '
            f"Currencies: {', '.join(AI_RATE_CURRENCIES)}. "
            f"Each value is how many {self.config.base_currency} one unit is worth."
        )
        try:
            answer = ask(prompt)
        except Exception as e:
            logger.warning("Rate lookup failed: %s", e)
            return RateUpdateResult(success=False, message=str(e) or "Rate lookup failed")

        match = re.search(r"\{[^}]+\}", answer or "")
        if match is None:
            return RateUpdateResult(success=False, message="Could not parse the AI response")
        try:
            rates = json.loads(match.group(0))
        except ValueError:
            return RateUpdateResult(success=False, message="Could not parse the AI response")
        if not isinstance(rates, dict):
            return RateUpdateResult(success=False, message="Could not parse the AI response")

        applied = self.apply_rates(rates)
        logger.info("Applied AI rates for %s", ", ".join(applied) or "no currencies")
        return RateUpdateResult(
            success=True,
            message=f"Rates updated: {', '.join(rates)}",
            applied=tuple(applied),
        )

    def refresh_rates(self, ask: Optional[AskFunction] = None, force: bool = False) -> RateUpdateResult:
        """Refresh rates older than a day: AI first, built-in defaults second."""
        now = self._clock()
        last = self.config.last_updated
        if not force and last > 0 and now - last < RATE_MAX_AGE_SECONDS:
            return RateUpdateResult(success=True, message="Rates are up to date", method="fallback")

        if ask is not None:
            result = self.fetch_rates_with_ai(ask)
            if result.success:
                self._touch(now)
                return result

        self.config = CurrencyConfig(
            base_currency=self.config.base_currency,
            rates=dict(DEFAULT_RATES),
            last_updated=now,
        )
        self._save()
        return RateUpdateResult(success=True, message="Built-in rates loaded", method="fallback")

    def _touch(self, now: float) -> None:
        self.config = CurrencyConfig(
            base_currency=self.config.base_currency,
            rates=self.config.rates,
            last_updated=now,
        )
        self._save()

    def _load(self) -> None:
        try:
            raw = self.storage.get(STORAGE_KEY)
        except StorageError as e:
            logger.error("Failed to read currency config: %s", e)
            return
        if not raw:
            return
        try:
            parsed = json.loads(raw)
            saved_rates = parsed.get("rates") or {}
            rates = dict(DEFAULT_RATES)
            rates.update({k: v for k, v in saved_rates.items() if is_rate(v)})
            self.config = CurrencyConfig(
                base_currency=parsed.get("baseCurrency") or DEFAULT_BASE_CURRENCY,
                rates=rates,
                last_updated=parsed.get("lastUpdated") or 0,
            )
        except (AttributeError, TypeError, ValueError, RecursionError) as e:
            logger.error("Failed to load currency config: %s", e)

    def _save(self) -> None:
        payload = {
            "baseCurrency": self.config.base_currency,
            "rates": self.get_all_rates(),
            "lastUpdated": self.config.last_updated,
        }
        try:
            self.storage.set(STORAGE_KEY, json.dumps(payload))
        except StorageError as e:
            logger.error("Failed to save currency config: %s", e)
