"""
Cálculos del libro de saldos (Gasto → Empeño → Pago)

Funciones puras, sin acceso a base de datos ni estado oculto:
- Techo de asignación (máximo que puede tomar un empeño/pago nuevo o editado)
- Validación de montos contra el techo
- Saldos restantes y estado derivado del gasto
- Formato monetario del mensaje de error

Toda comparación se hace en unidades mínimas (centavos) para evitar
artefactos de punto flotante.
"""

import enum
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional


MINOR_UNIT = Decimal('0.01')
ZERO = Decimal('0.00')
# Mayor valor que cabe en Numeric(15, 2)
MAX_AMOUNT = Decimal('9999999999999.99')
DEFAULT_CURRENCY_SYMBOL = "R$"


class ExpenseStatus(str, enum.Enum):
    """Estados de ejecución de un gasto"""
    AWAITING_COMMITMENT = "AWAITING_COMMITMENT"   # Sin empeños
    PARTIALLY_COMMITTED = "PARTIALLY_COMMITTED"   # 0 < empeñado < monto
    AWAITING_PAYMENT = "AWAITING_PAYMENT"         # Totalmente empeñado, sin pagos
    PARTIALLY_PAID = "PARTIALLY_PAID"             # Pagos parciales
    PAID = "PAID"                                 # Pagado completamente


class InvalidAmount(ValueError):
    """
    Monto de asignación inválido: no positivo o mayor que el techo.

    Es un error local: quien llama lo muestra junto al campo y no envía el formulario.
    """

    NON_POSITIVE = "non_positive"
    EXCEEDS_CEILING = "exceeds_ceiling"
    NOT_A_NUMBER = "not_a_number"

    def __init__(self, amount: Any, ceiling: Decimal, reason: str, symbol: str = DEFAULT_CURRENCY_SYMBOL):
        self.amount = amount
        self.ceiling = ceiling
        self.reason = reason
        self.message = allocation_error_message(ceiling, symbol)
        super().__init__(self.message)


def money(value: Any) -> Decimal:
    """
    Convertir a Decimal redondeado a centavos (ROUND_HALF_UP)

    Los float pasan por str() para no arrastrar la representación binaria.

    Raises:
        ValueError: si el valor no es numérico o no cabe en Numeric(15, 2)
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a monetary value: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        if not amount.is_finite():
            raise ValueError(f"Not a monetary value: {value!r}")
        amount = amount.quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # Texto no numérico o más dígitos de los que admite el contexto decimal
        raise ValueError(f"Not a monetary value: {value!r}")
    if abs(amount) > MAX_AMOUNT:
        raise ValueError(f"Monetary value out of range: {value!r}")
    return amount


def positive_money(value: Any) -> Decimal:
    """Monto de entrada: redondeado a centavos como `money` y mayor que cero"""
    amount = money(value)
    if amount <= ZERO:
        raise ValueError("Amount must be greater than zero")
    return amount


def _read_amount(source: Any, field: str) -> Any:
    """Leer un monto de un registro ORM, esquema Pydantic, dict o número suelto"""
    if source is None:
        return None
    if isinstance(source, (Decimal, int, float, str)) and not isinstance(source, bool):
        return source
    if isinstance(source, Mapping):
        return source.get(field)
    return getattr(source, field, None)


def remaining_amount(total: Any, allocated: Any) -> Decimal:
    """Saldo restante = total − asignado"""
    return money(total) - money(allocated or 0)


def max_allocatable(parent: Any, child: Any = None) -> Decimal:
    """
    Techo para un empeño/pago nuevo o editado

    Args:
        parent: Registro padre con `remaining_amount` (gasto o empeño). None si aún
            no se ha cargado.
        child: Al editar, el registro hijo con su `amount` actual. Su monto ya está
            descontado del saldo del padre, por eso se vuelve a sumar.

    Returns:
        Techo en centavos, nunca negativo. 0.00 si no hay padre.
    """
    remaining = _read_amount(parent, "remaining_amount")
    if remaining is None:
        return ZERO

    ceiling = money(remaining)

    current = _read_amount(child, "amount")
    if current is not None:
        ceiling += money(current)

    return max(ceiling, ZERO)


def validate_allocation(amount: Any, ceiling: Any, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> Decimal:
    """
    Validar un monto propuesto contra el techo

    Returns:
        El monto normalizado a centavos

    Raises:
        InvalidAmount: si el monto no es numérico, es <= 0 o supera el techo
    """
    try:
        limit = money(ceiling)
    except ValueError:
        limit = ZERO

    try:
        value = money(amount)
    except ValueError:
        raise InvalidAmount(amount, limit, InvalidAmount.NOT_A_NUMBER, symbol)

    if value <= ZERO:
        raise InvalidAmount(amount, limit, InvalidAmount.NON_POSITIVE, symbol)
    if value > limit:
        raise InvalidAmount(amount, limit, InvalidAmount.EXCEEDS_CEILING, symbol)

    return value


def is_valid_allocation(amount: Any, ceiling: Any) -> bool:
    try:
        validate_allocation(amount, ceiling)
    except InvalidAmount:
        return False
    return True


def derive_expense_status(amount: Any, committed: Any, paid: Any) -> ExpenseStatus:
    """
    Estado del gasto a partir de sus totales

    Transiciones (solo por creación/edición/eliminación de empeños y pagos):
    AWAITING_COMMITMENT → PARTIALLY_COMMITTED → AWAITING_PAYMENT → PARTIALLY_PAID → PAID
    """
    total = money(amount)
    committed_amount = money(committed or 0)
    paid_amount = money(paid or 0)

    if committed_amount <= ZERO:
        return ExpenseStatus.AWAITING_COMMITMENT
    if committed_amount < total:
        return ExpenseStatus.PARTIALLY_COMMITTED
    if paid_amount <= ZERO:
        return ExpenseStatus.AWAITING_PAYMENT
    if paid_amount < total:
        return ExpenseStatus.PARTIALLY_PAID
    return ExpenseStatus.PAID


def format_currency(value: Optional[Any], symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """
    Formato monetario pt-BR: R$ 1.234,56

    None se muestra como cero.
    """
    amount = money(value if value is not None else 0)
    sign = "-" if amount < 0 else ""
    integer_part, fraction_part = f"{abs(amount):.2f}".split(".")
    grouped = f"{int(integer_part):,}".replace(",", ".")
    return f"{sign}{symbol} {grouped},{fraction_part}"


def allocation_error_message(ceiling: Any, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """Mensaje del campo monto cuando la validación falla"""
    return f"Valid amount is required (max: {format_currency(ceiling, symbol)})"
