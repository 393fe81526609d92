"""
Validadores de claves de negocio del control financiero
"""
import re
from datetime import date
from typing import Optional


PROTOCOL_NUMBER_PATTERN = re.compile(r'^\d{5}\.\d{6}/\d{4}-\d{2}$')
COMMITMENT_NUMBER_PATTERN = re.compile(r'^(\d{4})NE\d{4}$')
PAYMENT_NUMBER_PATTERN = re.compile(r'^(\d{4})NP\d{4}$')


def validate_protocol_number(protocol_number: str) -> bool:
    """
    Valida número de protocolo de un gasto.
    Formato: #####.######/####-##
    Ejemplo: 23001.000123/2024-11
    """
    if not protocol_number:
        return False
    return PROTOCOL_NUMBER_PATTERN.match(protocol_number.strip()) is not None


def _validate_yearly_number(pattern: re.Pattern, number: str, year: Optional[int]) -> bool:
    if not number:
        return False

    match = pattern.match(number.strip())
    if not match:
        return False

    # El año del número debe coincidir con el ejercicio vigente
    expected_year = year if year is not None else date.today().year
    return int(match.group(1)) == expected_year


def validate_commitment_number(commitment_number: str, year: Optional[int] = None) -> bool:
    """
    Valida número de empeño (nota de empeño).
    - Formato: AAAANE#### (ej. 2024NE0001)
    - AAAA debe ser el año vigente
    """
    return _validate_yearly_number(COMMITMENT_NUMBER_PATTERN, commitment_number, year)


def validate_payment_number(payment_number: str, year: Optional[int] = None) -> bool:
    """
    Valida número de pago.
    - Formato: AAAANP#### (ej. 2024NP0001)
    - AAAA debe ser el año vigente
    """
    return _validate_yearly_number(PAYMENT_NUMBER_PATTERN, payment_number, year)


def normalize_business_key(value: str) -> str:
    """Limpia espacios y pasa a mayúsculas los sufijos NE/NP"""
    return value.strip().upper()
