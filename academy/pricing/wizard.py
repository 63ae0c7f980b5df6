"""Payment selection wizard: country -> payment method -> payment details.

A linear three-state flow with no persistence. It only surfaces static
instruction text; confirming a payment happens manually outside the system.
"""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
import logging
from typing import Dict, List, Optional

from ..config import DEFAULT_LOCALE
from ..messages import translate
from .instructions import CountryEntry, PaymentInstruction, load_catalog


logger = logging.getLogger("academy.pricing")


class WizardState(str, Enum):
    COUNTRY_SELECTION = "country_selection"
    PAYMENT_METHOD_SELECTION = "payment_method_selection"
    PAYMENT_DETAILS = "payment_details"


def _key(value: object, code: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(code)
    return value.strip().lower()


class PaymentWizard:
    def __init__(self, catalog: Optional[Dict[str, CountryEntry]] = None, *, locale: str = DEFAULT_LOCALE) -> None:
        self._catalog = catalog if catalog is not None else load_catalog()
        self._locale = locale
        self.state = WizardState.COUNTRY_SELECTION
        self.country: Optional[str] = None
        self.method: Optional[str] = None

    def countries(self) -> List[str]:
        return list(self._catalog)

    def available_methods(self) -> List[str]:
        if self.country is None:
            return []
        return list(self._catalog[self.country].methods)

    def select_country(self, country: str) -> WizardState:
        """Record the country (case-insensitive key) and move to method selection."""
        if self.state is not WizardState.COUNTRY_SELECTION:
            raise ValueError("invalid_state")
        key = _key(country, "invalid_country")
        if key not in self._catalog:
            raise ValueError("invalid_country")
        self.country = key
        self.state = WizardState.PAYMENT_METHOD_SELECTION
        return self.state

    def select_method(self, method: str) -> WizardState:
        if self.state is not WizardState.PAYMENT_METHOD_SELECTION:
            raise ValueError("invalid_state")
        key = _key(method, "invalid_payment_method")
        if key not in self.available_methods():
            raise ValueError("invalid_payment_method")
        self.method = key
        self.state = WizardState.PAYMENT_DETAILS
        logger.debug("payment method chosen country=%s method=%s", self.country, key)
        return self.state

    def back(self) -> WizardState:
        """Step back once, clearing only the most recently chosen field."""
        if self.state is WizardState.PAYMENT_DETAILS:
            self.method = None
            self.state = WizardState.PAYMENT_METHOD_SELECTION
        elif self.state is WizardState.PAYMENT_METHOD_SELECTION:
            self.country = None
            self.state = WizardState.COUNTRY_SELECTION
        return self.state

    def close(self) -> None:
        self.state = WizardState.COUNTRY_SELECTION
        self.country = None
        self.method = None

    def details(self) -> Optional[PaymentInstruction]:
        if self.state is not WizardState.PAYMENT_DETAILS or self.country is None or self.method is None:
            return None
        instruction = self._catalog[self.country].methods[self.method]
        return replace(instruction, note=translate("payment_receipt_note", self._locale))


__all__ = ["PaymentWizard", "WizardState"]
