"""Phone number validation and formatting for Chilean mobile numbers."""

import re
from typing import List

from ..domain.errors import InvalidPhone

_SEPARATORS = re.compile(r"[\s\-()]")


class PhoneNormalizer:
    """
    Converts between user input, storage and display forms.

    Input:   987654321 (separators allowed)
    Storage: +56987654321
    Display: +56 9 8765 4321
    """

    def __init__(
        self,
        country_code: str = "56",
        leading_digit: str = "9",
        subscriber_digits: int = 9,
    ) -> None:
        self.country_code = country_code
        self.leading_digit = leading_digit
        self.subscriber_digits = subscriber_digits
        self._input_re = re.compile(rf"^{leading_digit}[0-9]{{{subscriber_digits - 1}}}$")
        self._canonical_re = re.compile(
            rf"^\+{country_code}{leading_digit}[0-9]{{{subscriber_digits - 1}}}$"
        )

    @staticmethod
    def clean(phone: str) -> str:
        return _SEPARATORS.sub("", phone or "")

    def is_valid_input(self, phone: str) -> bool:
        return bool(self._input_re.match(self.clean(phone)))

    def is_canonical(self, phone: str) -> bool:
        return bool(self._canonical_re.match(phone or ""))

    def to_storage(self, phone: str) -> str:
        cleaned = self.clean(phone)
        if not self._input_re.match(cleaned):
            raise InvalidPhone(
                self.validation_message(),
                details=[{"field": "phone", "error": "INVALID_FORMAT", "examples": self.examples()}],
            )
        return f"+{self.country_code}{cleaned}"

    def to_display(self, phone: str) -> str:
        # Display never fails; anything that is not canonical is shown as-is.
        if not self.is_canonical(phone):
            return phone
        number = self.national_number(phone)
        return f"+{self.country_code} {number[:1]} {number[1:5]} {number[5:]}"

    def national_number(self, phone: str) -> str:
        prefix = f"+{self.country_code}"
        if phone.startswith(prefix):
            return phone[len(prefix):]
        return phone

    def validation_message(self) -> str:
        return (
            f"Phone number must have {self.subscriber_digits} digits and start with "
            f"{self.leading_digit} (e.g. 987654321)"
        )

    @staticmethod
    def examples() -> List[str]:
        return ["987654321", "912345678", "956789012", "998877665"]
