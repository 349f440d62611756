from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from email_validator import EmailNotValidError, validate_email

ROLES = ("user", "manager", "admin")
MIN_PASSWORD_LENGTH = 6
CENT = Decimal("0.01")


def _number(value) -> Optional[Decimal]:
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    # NaN e infinito no son montos válidos
    return number if number.is_finite() else None


def _money(value) -> Decimal:
    """Monto redondeado a centavos; lo que no es un número finito cuenta como 0."""
    number = _number(value)
    return (number if number is not None else Decimal("0")).quantize(CENT)


def _empty_row() -> dict:
    return {"product": None, "name": "", "quantity": 1, "price": Decimal("0.00"), "subtotal": Decimal("0.00")}


class SaleDraft:
    """Formulario de venta: renglones editables con subtotal y total recalculados."""

    def __init__(self, customer: str = "", payment_method: str = "Cash", status: str = "Completed", notes: str = ""):
        self.customer = customer
        self.payment_method = payment_method
        self.status = status
        self.notes = notes
        self.rows: List[dict] = [_empty_row()]

    @property
    def total(self) -> Decimal:
        return sum((row["subtotal"] for row in self.rows), Decimal("0.00"))

    def _recalc(self, index: int):
        row = self.rows[index]
        row["subtotal"] = (row["price"] * row["quantity"]).quantize(CENT)

    def set_product(self, index: int, product: dict):
        """Al elegir el producto se copia su precio actual."""
        row = self.rows[index]
        row["product"] = product["id"]
        row["name"] = product.get("name", "")
        row["price"] = _money(product.get("price"))
        self._recalc(index)

    def set_quantity(self, index: int, quantity):
        try:
            self.rows[index]["quantity"] = int(quantity)
        except (TypeError, ValueError):
            self.rows[index]["quantity"] = 0
        self._recalc(index)

    def set_price(self, index: int, price):
        self.rows[index]["price"] = _money(price)
        self._recalc(index)

    def add_row(self):
        self.rows.append(_empty_row())

    def remove_row(self, index: int) -> bool:
        # Siempre queda al menos un renglón
        if len(self.rows) <= 1:
            return False
        del self.rows[index]
        return True

    def validate(self) -> Dict[str, str]:
        errors = {}
        if not self.customer.strip():
            errors["customer"] = "Customer name is required"
        for i, row in enumerate(self.rows):
            if row["product"] is None:
                errors[f"items.{i}.product"] = "Product is required"
            if row["quantity"] <= 0:
                errors[f"items.{i}.quantity"] = "Quantity must be greater than 0"
        return errors

    def to_payload(self) -> dict:
        payload = {
            "customer": self.customer.strip(),
            "paymentMethod": self.payment_method,
            "status": self.status,
            "items": [
                {"product": row["product"], "quantity": row["quantity"], "price": float(row["price"])}
                for row in self.rows
            ],
        }
        if self.notes:
            payload["notes"] = self.notes
        return payload


def validate_inventory_item(data: dict) -> Dict[str, str]:
    errors = {}
    if not str(data.get("name") or "").strip():
        errors["name"] = "Name is required"
    for field in ("quantity", "price", "cost", "reorderLevel"):
        value = data.get(field)
        if value is None or value == "":
            continue
        number = _number(value)
        if number is None:
            errors[field] = "Must be a number"
        elif number < 0:
            errors[field] = "Must be 0 or greater"
    return errors


def validate_user(data: dict, require_password: bool = True) -> Dict[str, str]:
    errors = {}
    if not str(data.get("name") or "").strip():
        errors["name"] = "Name is required"

    email = str(data.get("email") or "").strip()
    if not email:
        errors["email"] = "Email is required"
    else:
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            errors["email"] = "Please enter a valid email"

    password = data.get("password") or ""
    if require_password or password:
        if len(password) < MIN_PASSWORD_LENGTH:
            errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        elif password != (data.get("confirmPassword") or ""):
            errors["confirmPassword"] = "Passwords do not match"

    role = data.get("role")
    if role and role not in ROLES:
        errors["role"] = f"Role must be one of: {', '.join(ROLES)}"
    return errors
