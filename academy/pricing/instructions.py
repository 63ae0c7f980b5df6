"""
Loader for the static payment-instruction catalog (`payment_methods.yaml`).

The catalog is read once per path and validated eagerly so a malformed file
fails at startup, not when a learner opens the wizard.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml


DEFAULT_CATALOG_PATH = Path(__file__).with_name("payment_methods.yaml")


@dataclass(frozen=True)
class WalletDetails:
    number: str
    brands: Tuple[str, ...]


@dataclass(frozen=True)
class BankDetails:
    name: str
    bank: str
    account: str
    swift: str


@dataclass(frozen=True)
class PaymentInstruction:
    country: str
    method: str
    title: str
    amount: str
    wallet: Optional[WalletDetails] = None
    account: Optional[str] = None
    bank: Optional[BankDetails] = None
    note: str = ""


@dataclass(frozen=True)
class CountryEntry:
    key: str
    label: str
    methods: Dict[str, PaymentInstruction] = field(default_factory=dict)


class CatalogFormatError(ValueError):
    """Raised when the payment catalog file does not have the expected shape."""


def _text(raw: dict, key: str, where: str) -> str:
    value = raw.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise CatalogFormatError(f"{where}: missing '{key}'")
    return str(value)


def _parse_method(country: str, method: str, raw: object) -> PaymentInstruction:
    where = f"{country}/{method}"
    if not isinstance(raw, dict):
        raise CatalogFormatError(f"{where}: expected a mapping")
    wallet = None
    bank = None
    if "wallet" in raw:
        w = raw["wallet"] or {}
        wallet = WalletDetails(
            number=_text(w, "number", where),
            brands=tuple(str(b) for b in (w.get("brands") or [])),
        )
    if "bank" in raw:
        b = raw["bank"] or {}
        bank = BankDetails(
            name=_text(b, "name", where),
            bank=_text(b, "bank", where),
            account=_text(b, "account", where),
            swift=_text(b, "swift", where),
        )
    account = str(raw["account"]) if raw.get("account") is not None else None
    if sum(x is not None for x in (wallet, bank, account)) != 1:
        raise CatalogFormatError(f"{where}: exactly one of wallet, account, bank is required")
    return PaymentInstruction(
        country=country,
        method=method,
        title=_text(raw, "title", where),
        amount=_text(raw, "amount", where),
        wallet=wallet,
        account=account,
        bank=bank,
    )


def parse_catalog(data: object) -> Dict[str, CountryEntry]:
    if not isinstance(data, dict) or not isinstance(data.get("countries"), dict):
        raise CatalogFormatError("catalog: expected top-level 'countries' mapping")
    out: Dict[str, CountryEntry] = {}
    for country, raw in data["countries"].items():
        if not isinstance(raw, dict) or not isinstance(raw.get("methods"), dict) or not raw["methods"]:
            raise CatalogFormatError(f"{country}: expected non-empty 'methods' mapping")
        methods = {m: _parse_method(country, m, spec) for m, spec in raw["methods"].items()}
        out[country] = CountryEntry(key=country, label=str(raw.get("label") or country), methods=methods)
    return out


@lru_cache(maxsize=8)
def load_catalog(path: Optional[str] = None) -> Dict[str, CountryEntry]:
    """Read and validate the YAML catalog; the packaged file is used by default."""
    source = Path(path) if path else DEFAULT_CATALOG_PATH
    with source.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return parse_catalog(data)


__all__ = [
    "BankDetails",
    "CatalogFormatError",
    "CountryEntry",
    "DEFAULT_CATALOG_PATH",
    "PaymentInstruction",
    "WalletDetails",
    "load_catalog",
    "parse_catalog",
]
