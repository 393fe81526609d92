"""
Tests para los validadores de claves de negocio
"""

import pytest
from datetime import date

from app.common.validators import (
    validate_protocol_number,
    validate_commitment_number,
    validate_payment_number,
    normalize_business_key,
)


class TestProtocolNumber:

    @pytest.mark.parametrize("value", ["23001.000123/2024-11", " 00000.000000/0000-00 "])
    def test_valid(self, value):
        assert validate_protocol_number(value)

    @pytest.mark.parametrize("value", ["", None, "23001000123/2024-11", "2300.000123/2024-11", "23001.000123/2024-1"])
    def test_invalid(self, value):
        assert not validate_protocol_number(value)


class TestYearlyNumbers:
    """Empeños y pagos: AAAANE#### / AAAANP#### con el año vigente"""

    def test_current_year_commitment(self):
        assert validate_commitment_number(f"{date.today().year}NE0001")

    def test_past_year_commitment_rejected(self):
        assert not validate_commitment_number(f"{date.today().year - 1}NE0001")

    def test_explicit_year(self):
        assert validate_commitment_number("2024NE0042", year=2024)
        assert validate_payment_number("2024NP0042", year=2024)

    @pytest.mark.parametrize("value", ["2024NP0001", "2024NE001", "24NE0001", "", None])
    def test_invalid_commitment_format(self, value):
        assert not validate_commitment_number(value, year=2024)

    def test_payment_suffix_must_be_np(self):
        assert not validate_payment_number("2024NE0001", year=2024)

    def test_normalize_business_key(self):
        assert normalize_business_key(" 2024ne0001 ") == "2024NE0001"
