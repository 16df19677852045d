"""
Typed Exception Hierarchy for the Inventory Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Count sessions and replenishment drafts are driven from interactive screens.
The caller must be able to tell "the operator typed something wrong" from
"the session is already closed" without parsing message strings:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example - WRONG way to handle errors:
    try:
        service.record_count(session_id, item_id, qty)
    except Exception as e:
        if "not active" in str(e):
            ...

Example - RIGHT way:
    try:
        service.record_count(session_id, item_id, qty)
    except SessionNotActiveError as e:
        api_response(code=e.code, session=e.session_id, status=e.status)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InventoryKernelError (base)
    |
    +-- ValidationError
    |   +-- EmptyResponsibleError
    |   +-- EmptyCountScopeError
    |   +-- ItemNotInScopeError
    |   +-- NegativeCountError
    |   +-- InvalidCountValueError
    |   +-- InvalidPeriodError
    |   +-- EmptyOrderError
    |   +-- MissingSupplierError
    |   +-- InvalidOrderLineError
    |   +-- UnknownOrderLineError
    |
    +-- InvalidStateError
    |   +-- SessionNotActiveError
    |   +-- SessionNotCompletedError
    |   +-- CountScopeConflictError
    |   +-- InvalidOrderTransitionError
    |
    +-- CountSessionNotFoundError
    |
    +-- AdjustmentWriteError
    |
    +-- OrderDispatchError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | EMPTY_RESPONSIBLE           | Count started without a responsible
                | EMPTY_COUNT_SCOPE           | Scope resolves to zero catalog items
                | ITEM_NOT_IN_SCOPE           | Count recorded for an item outside scope
                | NEGATIVE_COUNT              | Physical quantity below zero
                | INVALID_COUNT_VALUE         | Physical quantity is not an integer
                | INVALID_PERIOD              | Lookback window is not a positive int
                | EMPTY_ORDER                 | Order has no selected line
                | MISSING_SUPPLIER            | Order submitted without supplier
                | INVALID_ORDER_LINE          | Selected line quantity/price invalid
                | UNKNOWN_ORDER_LINE          | Edit addresses a line not in the draft
----------------|-----------------------------|-----------------------------------------
State           | SESSION_NOT_ACTIVE          | Operation on a closed count session
                | SESSION_NOT_COMPLETED       | Adjustments from a non-completed session
                | COUNT_SCOPE_CONFLICT        | Overlapping ACTIVE session exists
                | INVALID_ORDER_TRANSITION    | Purchase order status change not allowed
----------------|-----------------------------|-----------------------------------------
Lookup          | COUNT_SESSION_NOT_FOUND     | Unknown session id
----------------|-----------------------------|-----------------------------------------
Adjustment      | ADJUSTMENT_WRITE_FAILED     | One catalog write failed (collected)
----------------|-----------------------------|-----------------------------------------
Dispatch        | ORDER_DISPATCH_FAILED       | Order dispatcher reported failure

===============================================================================
HANDLING PATTERNS
===============================================================================

1. VALIDATION vs STATE:

    except ValidationError as e:
        # operator input; show the field and let them fix it
        show_field_error(e.code, str(e))
    except InvalidStateError as e:
        # the session/order moved on; reload the screen
        reload(e.code)

2. ADJUSTMENT FAILURES ARE DATA, NOT CONTROL FLOW:

    result = service.finish_count(session_id)
    for failure in result.adjustment_report.failed:
        log.warning(failure.code, extra={"item_id": failure.item_id})
    service.retry_adjustments(result.adjustment_report)

===============================================================================
DESIGN DECISIONS
===============================================================================

1. WHY INHERIT FROM Exception (not ValueError, etc.)?
   Domain exceptions should be catchable as a group. Inheriting from
   built-in types mixes domain errors with programming errors.

2. WHY code CLASS ATTRIBUTE (not instance)?
   Codes are static per exception type, usable without instantiation.

3. WHY IS AdjustmentWriteError AN EXCEPTION IF IT IS NEVER RAISED BY finish?
   It is collected into the AdjustmentReport. Keeping it in the hierarchy
   gives it a code and structured fields, and lets a caller that wants
   all-or-nothing behaviour raise it directly.

===============================================================================
"""

from __future__ import annotations


class InventoryKernelError(Exception):
    """
    Base exception for all inventory kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INVENTORY_KERNEL_ERROR"


# Validation exceptions


class ValidationError(InventoryKernelError):
    """Base exception for bad caller input. Always surfaced, never defaulted."""

    code: str = "VALIDATION_ERROR"


class EmptyResponsibleError(ValidationError):
    """A count session needs a named responsible operator."""

    code: str = "EMPTY_RESPONSIBLE"

    def __init__(self, responsible: str | None):
        self.responsible = responsible
        super().__init__("Count session responsible must be a non-empty name")


class EmptyCountScopeError(ValidationError):
    """The requested count scope contains no catalog items."""

    code: str = "EMPTY_COUNT_SCOPE"

    def __init__(self, scope: str, category_id: str | None = None):
        self.scope = scope
        self.category_id = category_id
        if category_id is not None:
            message = f"Category {category_id} has no items to count"
        else:
            message = "Catalog has no items to count"
        super().__init__(message)


class ItemNotInScopeError(ValidationError):
    """Count recorded for an item that is not part of the session scope."""

    code: str = "ITEM_NOT_IN_SCOPE"

    def __init__(self, session_id: str, item_id: str):
        self.session_id = session_id
        self.item_id = item_id
        super().__init__(f"Item {item_id} is not in scope of count session {session_id}")


class NegativeCountError(ValidationError):
    """Physical quantity cannot be negative."""

    code: str = "NEGATIVE_COUNT"

    def __init__(self, item_id: str, physical_qty: int):
        self.item_id = item_id
        self.physical_qty = physical_qty
        super().__init__(
            f"Physical quantity for item {item_id} cannot be negative (got {physical_qty})"
        )


class InvalidCountValueError(ValidationError):
    """Physical quantity must be a whole number."""

    code: str = "INVALID_COUNT_VALUE"

    def __init__(self, item_id: str, value: object):
        self.item_id = item_id
        self.value = value
        super().__init__(
            f"Physical quantity for item {item_id} must be an integer (got {value!r})"
        )


class InvalidPeriodError(ValidationError):
    """Lookback window must be a positive number of days."""

    code: str = "INVALID_PERIOD"

    def __init__(self, period_days: object):
        self.period_days = period_days
        super().__init__(f"period_days must be a positive integer (got {period_days!r})")


class EmptyOrderError(ValidationError):
    """A purchase order needs at least one selected line."""

    code: str = "EMPTY_ORDER"

    def __init__(self, draft_id: str):
        self.draft_id = draft_id
        super().__init__(f"Purchase order draft {draft_id} has no selected lines")


class MissingSupplierError(ValidationError):
    """A purchase order cannot be submitted without a supplier."""

    code: str = "MISSING_SUPPLIER"

    def __init__(self, draft_id: str):
        self.draft_id = draft_id
        super().__init__(f"Purchase order draft {draft_id} has no supplier")


class InvalidOrderLineError(ValidationError):
    """A selected purchase order line has an unusable quantity or price."""

    code: str = "INVALID_ORDER_LINE"

    def __init__(self, item_id: str, reason: str):
        self.item_id = item_id
        self.reason = reason
        super().__init__(f"Invalid order line for item {item_id}: {reason}")


class UnknownOrderLineError(ValidationError):
    """An edit addressed an item that has no line in the draft."""

    code: str = "UNKNOWN_ORDER_LINE"

    def __init__(self, draft_id: str, item_id: str):
        self.draft_id = draft_id
        self.item_id = item_id
        super().__init__(f"Purchase order draft {draft_id} has no line for item {item_id}")


# State exceptions


class InvalidStateError(InventoryKernelError):
    """Base exception for operations attempted in the wrong lifecycle state."""

    code: str = "INVALID_STATE"


class SessionNotActiveError(InvalidStateError):
    """Count session is COMPLETED or CANCELLED; it is immutable now."""

    code: str = "SESSION_NOT_ACTIVE"

    def __init__(self, session_id: str, status: str, action: str):
        self.session_id = session_id
        self.status = status
        self.action = action
        super().__init__(
            f"Cannot {action} count session {session_id}: status is {status}"
        )


class SessionNotCompletedError(InvalidStateError):
    """Adjustments may only be applied from a COMPLETED session."""

    code: str = "SESSION_NOT_COMPLETED"

    def __init__(self, session_id: str, status: str):
        self.session_id = session_id
        self.status = status
        super().__init__(
            f"Adjustments require a COMPLETED session; session {session_id} is {status}"
        )


class CountScopeConflictError(InvalidStateError):
    """Another ACTIVE count session already covers an overlapping scope."""

    code: str = "COUNT_SCOPE_CONFLICT"

    def __init__(self, requested_scope: str, conflicting_session_id: str):
        self.requested_scope = requested_scope
        self.conflicting_session_id = conflicting_session_id
        super().__init__(
            f"Scope {requested_scope} overlaps active count session "
            f"{conflicting_session_id}"
        )


class InvalidOrderTransitionError(InvalidStateError):
    """Purchase order status change is not allowed from its current status."""

    code: str = "INVALID_ORDER_TRANSITION"

    def __init__(self, draft_id: str, status: str, action: str):
        self.draft_id = draft_id
        self.status = status
        self.action = action
        super().__init__(
            f"Cannot {action} purchase order {draft_id} in status {status}"
        )


# Lookup exceptions


class CountSessionNotFoundError(InventoryKernelError):
    """Count session with given ID was not found."""

    code: str = "COUNT_SESSION_NOT_FOUND"

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Count session not found: {session_id}")


# Adjustment / dispatch exceptions


class AdjustmentWriteError(InventoryKernelError):
    """
    A single catalog quantity write failed while applying a count.

    Collected per item into the AdjustmentReport; the remaining adjustments
    still run.
    """

    code: str = "ADJUSTMENT_WRITE_FAILED"

    def __init__(self, item_id: str, target_quantity: int, reason: str):
        self.item_id = item_id
        self.target_quantity = target_quantity
        self.reason = reason
        super().__init__(
            f"Failed to set quantity of item {item_id} to {target_quantity}: {reason}"
        )


class OrderDispatchError(InventoryKernelError):
    """The order dispatcher (e-mail, supplier portal) reported a failure."""

    code: str = "ORDER_DISPATCH_FAILED"

    def __init__(self, draft_id: str, reason: str):
        self.draft_id = draft_id
        self.reason = reason
        super().__init__(f"Dispatch of purchase order {draft_id} failed: {reason}")
