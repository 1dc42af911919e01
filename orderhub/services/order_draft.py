"""
Order draft - the in-memory order being assembled before submission.

The draft is a plain value object: the HTTP layer keeps it in the Flask
session through to_dict()/from_dict() and hands it explicitly to the
committer. Nothing here talks to the database.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from orderhub.exceptions import BusinessLogicError, DraftValidationError
from orderhub.models.order import PlacedBy
from orderhub.services.pricing_service import clamp_discount_percent


def _coerce_id(value: Any):
    """Session round-trips turn ids into strings; bring numeric ids back to int."""
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return value


def _coerce_quantity(value: Any) -> int:
    # Fractional cases are rejected rather than truncated
    if isinstance(value, bool):
        raise BusinessLogicError(f'Invalid quantity: {value!r}')
    if isinstance(value, (float, Decimal)) and value != int(value):
        raise BusinessLogicError(f'Invalid quantity: {value!r}')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BusinessLogicError(f'Invalid quantity: {value!r}')


@dataclass(frozen=True)
class OrderLineSelection:
    """A (product, quantity) pair within a draft."""
    product_id: Any
    quantity: int


@dataclass
class NewRetailerInfo:
    """Contact fields for a retailer created during submission."""
    name: str = ''
    email: str = ''
    phone: str = ''
    address: str = ''

    def to_dict(self) -> Dict[str, str]:
        return {'name': self.name, 'email': self.email, 'phone': self.phone, 'address': self.address}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'NewRetailerInfo':
        data = data or {}
        return cls(
            name=(data.get('name') or '').strip(),
            email=(data.get('email') or '').strip(),
            phone=(data.get('phone') or '').strip(),
            address=(data.get('address') or '').strip(),
        )


@dataclass
class OrderDraft:
    """
    Mutable order draft.

    A distributor fills in the retailer side (existing or inline new retailer);
    a retailer fills in distributor_id. The acting side always comes from the
    authenticated user, never from the draft.
    """
    distributor_id: Any = None
    retailer_id: Any = None
    new_retailer: bool = False
    retailer_info: NewRetailerInfo = field(default_factory=NewRetailerInfo)
    lines: List[OrderLineSelection] = field(default_factory=list)
    discount_percent: Decimal = Decimal('0')
    notes: str = ''

    # --- mutations -------------------------------------------------------

    def select_retailer(self, retailer_id: Any) -> None:
        self.retailer_id = _coerce_id(retailer_id)
        self.new_retailer = False
        self.retailer_info = NewRetailerInfo()

    def use_new_retailer(self, info: NewRetailerInfo) -> None:
        self.retailer_id = None
        self.new_retailer = True
        self.retailer_info = info

    def select_distributor(self, distributor_id: Any) -> None:
        """Switching distributor switches catalog, so the lines are dropped."""
        distributor_id = _coerce_id(distributor_id)
        if distributor_id != self.distributor_id:
            self.lines = []
        self.distributor_id = distributor_id

    def set_line(self, product_id: Any, quantity: Any) -> None:
        """Add, replace or (quantity <= 0) remove the line for a product."""
        product_id = _coerce_id(product_id)
        quantity = _coerce_quantity(quantity)
        remaining = [line for line in self.lines if line.product_id != product_id]
        if quantity >= 1:
            # Replaced lines keep their position
            for index, line in enumerate(self.lines):
                if line.product_id == product_id:
                    remaining.insert(index, OrderLineSelection(product_id, quantity))
                    break
            else:
                remaining.append(OrderLineSelection(product_id, quantity))
        self.lines = remaining

    def remove_line(self, product_id: Any) -> None:
        product_id = _coerce_id(product_id)
        self.lines = [line for line in self.lines if line.product_id != product_id]

    def set_discount(self, percent: Any) -> None:
        """Clamp at the mutation boundary; the pricing engine trusts this value."""
        self.discount_percent = clamp_discount_percent(percent)

    def set_notes(self, notes: Optional[str]) -> None:
        self.notes = (notes or '').strip()

    def clear(self) -> None:
        self.distributor_id = None
        self.retailer_id = None
        self.new_retailer = False
        self.retailer_info = NewRetailerInfo()
        self.lines = []
        self.discount_percent = Decimal('0')
        self.notes = ''

    @property
    def is_empty(self) -> bool:
        return not any(line.quantity >= 1 for line in self.lines)

    # --- serialization ---------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            'distributor_id': self.distributor_id,
            'retailer_id': self.retailer_id,
            'new_retailer': self.new_retailer,
            'retailer_info': self.retailer_info.to_dict(),
            'lines': [{'product_id': l.product_id, 'quantity': l.quantity} for l in self.lines],
            'discount_percent': str(self.discount_percent),
            'notes': self.notes,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'OrderDraft':
        if not data:
            return cls()
        return cls(
            distributor_id=_coerce_id(data.get('distributor_id')),
            retailer_id=_coerce_id(data.get('retailer_id')),
            new_retailer=bool(data.get('new_retailer')),
            retailer_info=NewRetailerInfo.from_dict(data.get('retailer_info')),
            lines=[
                OrderLineSelection(_coerce_id(l['product_id']), _coerce_quantity(l['quantity']))
                for l in data.get('lines', [])
            ],
            discount_percent=clamp_discount_percent(data.get('discount_percent', '0')),
            notes=data.get('notes') or '',
        )


# =====================================================
# VALIDATION
# =====================================================

def draft_problems(draft: OrderDraft, placed_by: str = PlacedBy.DISTRIBUTOR.value) -> List[str]:
    """Reasons the draft cannot be submitted yet (empty list when it can)."""
    problems = []
    if draft.is_empty:
        problems.append('Please add at least one product to the order')
    if placed_by == PlacedBy.RETAILER.value:
        if draft.distributor_id is None:
            problems.append('Please select a distributor')
    elif draft.retailer_id is None and not draft.new_retailer:
        problems.append('Please select a retailer or add a new one')
    return problems


def can_submit(draft: OrderDraft, placed_by: str = PlacedBy.DISTRIBUTOR.value) -> bool:
    """
    True when the draft has a line with quantity >= 1 and either an existing
    retailer or the new-retailer flag (a selected distributor when a retailer
    is ordering). Lines pointing at unknown products do
    not block submission; they are simply priced at zero.
    """
    return not draft_problems(draft, placed_by)


def validate_draft(draft: OrderDraft, placed_by: str = PlacedBy.DISTRIBUTOR.value) -> None:
    """Raise DraftValidationError with the first problem found."""
    problems = draft_problems(draft, placed_by)
    if problems:
        raise DraftValidationError(problems[0], payload={'errors': problems})
