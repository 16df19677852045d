"""
Module: inventory_engines.purchase_order
Responsibility:
    Materialize accepted replenishment suggestions into an editable,
    immutable purchase order draft; validate it for submission; and move
    it through the purchase order lifecycle.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Sending the order is an
    external collaborator concern (``OrderDispatcher`` in the services
    layer).

Invariants enforced:
    - Drafts and lines are frozen; every edit returns a new draft.  Edits
      never re-run the indicator engine.
    - ``line_total = quantity * unit_price``; ``total`` sums the selected
      lines only.
    - Lines and edits are only accepted while the order is in DRAFT.
    - Status moves only along PURCHASE_ORDER_WORKFLOW.

Failure modes:
    - EmptyOrderError / MissingSupplierError / InvalidOrderLineError from
      ``validate_for_submission``.
    - UnknownOrderLineError when an edit names an item not on the draft.
    - InvalidOrderTransitionError for a transition the workflow forbids.

Usage:
    from inventory_engines.purchase_order import PurchaseOrderDraftBuilder

    builder = PurchaseOrderDraftBuilder()
    draft = builder.build(suggestions=suggestions, supplier_id="sup-1", created_at=now)
    draft = draft.with_quantity("item-1", 40).with_selection("item-2", False)
    draft.validate_for_submission()
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Sequence
from uuid import UUID, uuid4

from inventory_kernel.domain.catalog import ItemKind
from inventory_kernel.domain.workflow import Transition, Workflow
from inventory_kernel.exceptions import (
    EmptyOrderError,
    InvalidOrderLineError,
    InvalidOrderTransitionError,
    MissingSupplierError,
    UnknownOrderLineError,
)
from inventory_kernel.logging_config import get_logger
from inventory_engines.replenishment import ReplenishmentSuggestion
from inventory_engines.tracer import traced_engine

logger = get_logger("engines.purchase_order")

ZERO = Decimal("0")


class PurchaseOrderStatus(str, Enum):
    """Lifecycle state of a purchase order."""

    DRAFT = "draft"
    SENT = "sent"
    CONFIRMED = "confirmed"
    RECEIVED = "received"
    CANCELLED = "cancelled"


PURCHASE_ORDER_WORKFLOW = Workflow(
    name="purchase_order",
    description="Purchase order lifecycle",
    initial_state=PurchaseOrderStatus.DRAFT.value,
    states=tuple(s.value for s in PurchaseOrderStatus),
    transitions=(
        Transition("draft", "draft", action="edit"),
        Transition("draft", "sent", action="dispatch"),
        Transition("sent", "confirmed", action="confirm"),
        Transition("confirmed", "received", action="receive"),
        Transition("draft", "cancelled", action="cancel"),
        Transition("sent", "cancelled", action="cancel"),
        Transition("confirmed", "cancelled", action="cancel"),
    ),
    terminal_states=("received", "cancelled"),
)


@dataclass(frozen=True)
class OrderTerms:
    """Commercial defaults applied to new drafts."""
    payment_terms: str = "30 days"
    freight: str = "CIF"
    currency: str = "BRL"
    default_unit: str = "UN"


@dataclass(frozen=True)
class PurchaseOrderLine:
    """One item line of a purchase order."""
    item_id: str
    description: str
    quantity: int
    unit_price: Decimal
    code: str | None = None
    unit: str = "UN"
    item_kind: ItemKind = ItemKind.PRODUCT
    selected: bool = True

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def problem(self) -> str | None:
        """Why this line cannot be submitted, or None when it can."""
        if self.quantity <= 0:
            return f"quantity must be positive, got {self.quantity}"
        if self.unit_price < ZERO:
            return f"unit price cannot be negative, got {self.unit_price}"
        return None


@dataclass(frozen=True)
class PurchaseOrderSubmission:
    """Validated payload handed to the order dispatcher."""
    draft_id: UUID
    supplier_id: str
    lines: tuple[PurchaseOrderLine, ...]
    total: Decimal
    currency: str
    payment_terms: str
    freight: str
    delivery_date: date | None = None
    notes: str = ""


@dataclass(frozen=True)
class PurchaseOrderDraft:
    """
    A frozen purchase order proposal.

    Contract:
        Every ``with_*`` / ``without_line`` edit returns a new draft and
        requires DRAFT status.  ``transition`` returns a new draft in the
        target status.
    """
    id: UUID
    lines: tuple[PurchaseOrderLine, ...]
    created_at: datetime
    supplier_id: str | None = None
    status: PurchaseOrderStatus = PurchaseOrderStatus.DRAFT
    delivery_date: date | None = None
    payment_terms: str = "30 days"
    freight: str = "CIF"
    currency: str = "BRL"
    notes: str = ""
    status_history: tuple[str, ...] = field(default=(), compare=False)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def selected_lines(self) -> tuple[PurchaseOrderLine, ...]:
        return tuple(line for line in self.lines if line.selected)

    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self.selected_lines), ZERO)

    def line(self, item_id: str) -> PurchaseOrderLine:
        for line in self.lines:
            if line.item_id == item_id:
                return line
        raise UnknownOrderLineError(str(self.id), item_id)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def _require(self, action: str) -> Transition:
        transition = PURCHASE_ORDER_WORKFLOW.resolve(self.status.value, action)
        if transition is None:
            raise InvalidOrderTransitionError(str(self.id), self.status.value, action)
        return transition

    def _replace_line(self, item_id: str, **changes) -> PurchaseOrderDraft:
        self._require("edit")
        target = self.line(item_id)
        lines = tuple(
            replace(line, **changes) if line is target else line for line in self.lines
        )
        return replace(self, lines=lines)

    def with_quantity(self, item_id: str, quantity: int) -> PurchaseOrderDraft:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidOrderLineError(item_id, f"quantity must be an integer, got {quantity!r}")
        return self._replace_line(item_id, quantity=quantity)

    def with_unit_price(self, item_id: str, unit_price: Decimal) -> PurchaseOrderDraft:
        return self._replace_line(item_id, unit_price=Decimal(unit_price))

    def with_selection(self, item_id: str, selected: bool) -> PurchaseOrderDraft:
        return self._replace_line(item_id, selected=bool(selected))

    def without_line(self, item_id: str) -> PurchaseOrderDraft:
        self._require("edit")
        target = self.line(item_id)
        return replace(self, lines=tuple(line for line in self.lines if line is not target))

    def with_supplier(self, supplier_id: str | None) -> PurchaseOrderDraft:
        self._require("edit")
        return replace(self, supplier_id=supplier_id or None)

    def with_terms(
        self,
        *,
        delivery_date: date | None = None,
        payment_terms: str | None = None,
        freight: str | None = None,
        notes: str | None = None,
    ) -> PurchaseOrderDraft:
        """Change commercial terms; arguments left as None keep their value."""
        self._require("edit")
        return replace(
            self,
            delivery_date=delivery_date if delivery_date is not None else self.delivery_date,
            payment_terms=payment_terms if payment_terms is not None else self.payment_terms,
            freight=freight if freight is not None else self.freight,
            notes=notes if notes is not None else self.notes,
        )

    # ------------------------------------------------------------------
    # Submission and lifecycle
    # ------------------------------------------------------------------

    def validate_for_submission(self) -> None:
        """
        Raise unless the draft can be sent to a supplier.

        Raises:
            EmptyOrderError: no selected line.
            MissingSupplierError: no supplier chosen.
            InvalidOrderLineError: a selected line has quantity <= 0 or a
                negative unit price.
        """
        selected = self.selected_lines
        if not selected:
            raise EmptyOrderError(str(self.id))
        if not self.supplier_id:
            raise MissingSupplierError(str(self.id))
        for line in selected:
            problem = line.problem()
            if problem is not None:
                raise InvalidOrderLineError(line.item_id, problem)

    def to_submission(self) -> PurchaseOrderSubmission:
        """Validate and freeze the selected lines into a dispatch payload."""
        self.validate_for_submission()
        return PurchaseOrderSubmission(
            draft_id=self.id,
            supplier_id=self.supplier_id,
            lines=self.selected_lines,
            total=self.total,
            currency=self.currency,
            payment_terms=self.payment_terms,
            freight=self.freight,
            delivery_date=self.delivery_date,
            notes=self.notes,
        )

    def transition(self, action: str) -> PurchaseOrderDraft:
        """
        Return the order moved along ``action``.

        Raises:
            InvalidOrderTransitionError: the workflow has no such transition
                from the current status.
        """
        transition = self._require(action)
        logger.info(
            "purchase_order_transitioned",
            extra={
                "draft_id": str(self.id),
                "from_status": transition.from_state,
                "to_status": transition.to_state,
                "action": action,
            },
        )
        return replace(
            self,
            status=PurchaseOrderStatus(transition.to_state),
            status_history=self.status_history + (transition.from_state,),
        )

    def confirm(self) -> PurchaseOrderDraft:
        return self.transition("confirm")

    def receive(self) -> PurchaseOrderDraft:
        return self.transition("receive")

    def cancel(self) -> PurchaseOrderDraft:
        return self.transition("cancel")


class PurchaseOrderDraftBuilder:
    """Builds drafts from suggestions with the configured commercial terms."""

    def __init__(self, terms: OrderTerms | None = None):
        self.terms = terms or OrderTerms()

    @staticmethod
    def line_from(
        suggestion: ReplenishmentSuggestion,
        default_unit: str = "UN",
    ) -> PurchaseOrderLine:
        return PurchaseOrderLine(
            item_id=suggestion.item_id,
            description=suggestion.item_name,
            quantity=suggestion.suggested_quantity,
            unit_price=suggestion.reference_price,
            code=suggestion.sku,
            unit=suggestion.unit or default_unit,
            item_kind=suggestion.item_kind,
        )

    @traced_engine("purchase_order", "1.0", fingerprint_fields=("supplier_id",))
    def build(
        self,
        suggestions: Sequence[ReplenishmentSuggestion],
        created_at: datetime,
        supplier_id: str | None = None,
        draft_id: UUID | None = None,
        delivery_date: date | None = None,
        notes: str = "",
    ) -> PurchaseOrderDraft:
        """
        One selected line per suggestion, in suggestion order.

        An empty suggestion list yields an empty draft; submission will
        reject it with EmptyOrderError.
        """
        draft = PurchaseOrderDraft(
            id=draft_id or uuid4(),
            lines=tuple(self.line_from(s, self.terms.default_unit) for s in suggestions),
            created_at=created_at,
            supplier_id=supplier_id or None,
            delivery_date=delivery_date,
            payment_terms=self.terms.payment_terms,
            freight=self.terms.freight,
            currency=self.terms.currency,
            notes=notes,
        )
        logger.info(
            "purchase_order_draft_built",
            extra={
                "draft_id": str(draft.id),
                "supplier_id": draft.supplier_id,
                "line_count": len(draft.lines),
                "total": str(draft.total),
            },
        )
        return draft
