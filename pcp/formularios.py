"""Conversão dos campos numéricos dos formulários."""
from decimal import Decimal, InvalidOperation

from pcp.errors import ErroValidacao

# limites das colunas: Integer e Numeric(12, 2)
MAX_INTEIRO = 2**31 - 1
MAX_DECIMAL = Decimal("9999999999.99")


def to_decimal(v, default="0", campo="Valor"):
    try:
        d = Decimal(str(v).replace(",", "."))
    except (InvalidOperation, TypeError, ValueError):
        return Decimal(default)
    if not d.is_finite():
        raise ErroValidacao(f"{campo} deve ser um número.")
    if abs(d) > MAX_DECIMAL:
        raise ErroValidacao(f"{campo} acima do limite ({MAX_DECIMAL}).")
    return d


def to_int(v, campo="Valor"):
    try:
        n = int(v or "")
    except ValueError:
        raise ErroValidacao(f"{campo} deve ser um número inteiro.") from None
    if abs(n) > MAX_INTEIRO:
        raise ErroValidacao(f"{campo} acima do limite ({MAX_INTEIRO}).")
    return n
