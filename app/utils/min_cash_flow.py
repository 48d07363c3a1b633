"""
Min-Cash-Flow Algorithm Module

This module holds the pure part of the balance engine: turning a ledger of
group expenses and settlements into net balances, and resolving those
balances into a short list of settling transfers.

The algorithm works by:
1. Calculating net balances for each user (paid - owed + settled out - settled in)
2. Separating users into debtors (negative balance) and creditors (positive balance)
3. Sorting debtors most-negative first and creditors largest first (stable sort)
4. Sweeping both lists with two pointers, transferring min(|debt|, credit) each step

The sweep yields at most (#debtors + #creditors - 1) transfers. It is the usual
greedy approximation for expense-splitting apps, not a global minimum.

Time Complexity: O(n log n) for sorting + O(n) for matching = O(n log n)
Space Complexity: O(n) for storing balances and settlement results

Nothing here touches the database, so every function can be exercised against
an in-memory snapshot of the ledger.

Example Usage:
    from app.utils.min_cash_flow import calculate_balances, min_cash_flow

    expenses = [
        {"payer": "A", "amount": Decimal("300"),
         "splits": [("A", Decimal("100")), ("B", Decimal("100")), ("C", Decimal("100"))]},
    ]
    settlements = [{"from": "B", "to": "A", "amount": Decimal("100")}]

    balances = calculate_balances(expenses, settlements)
    # {'A': Decimal('100.00'), 'B': Decimal('0.00'), 'C': Decimal('-100.00')}
    min_cash_flow(balances)
    # [{"from": "C", "to": "A", "amount": Decimal("100.00")}]
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
TOLERANCE = Decimal('0.01')


def round_decimal(value: Decimal, precision: Decimal = CENT) -> Decimal:
    """
    Round a Decimal value to the specified precision, halves away from zero.

    Example:
        >>> round_decimal(Decimal("43.335"))
        Decimal('43.34')
    """
    return Decimal(value).quantize(precision, rounding=ROUND_HALF_UP)


def equal_split(amount: Decimal, user_ids: Sequence[str]) -> List[Tuple[str, Decimal]]:
    """
    Divide an amount evenly across users, each share rounded to cents.

    The rounding residual is not redistributed: 100 / 3 gives three shares
    of 33.33 and the remaining cent stays unassigned.

    Raises:
        ValueError: If there is nobody to split between
    """
    if not user_ids:
        raise ValueError("No members to split expense among")

    share = round_decimal(Decimal(amount) / Decimal(len(user_ids)))
    return [(user_id, share) for user_id in user_ids]


def validate_balance_sum(balances: Mapping[str, Decimal], tolerance: Decimal = TOLERANCE) -> None:
    """
    Validate that the sum of all balances is approximately zero.

    Every expense credits its payer exactly what it debits its splits, and
    every settlement moves the same amount between two accounts, so a
    non-zero total can only come from rounding residuals or bad rows.

    Raises:
        ValueError: If the sum of balances exceeds the tolerance
    """
    total = sum(balances.values(), Decimal('0'))
    if abs(total) > tolerance:
        raise ValueError(
            f"Balances not zero-sum: total={total}, tolerance={tolerance}"
        )


def calculate_balances(
    expenses: Iterable[Mapping],
    settlements: Iterable[Mapping] = (),
) -> Dict[str, Decimal]:
    """
    Calculate net balance for each user from a ledger snapshot.

    - Positive balance: user is owed money (creditor)
    - Negative balance: user owes money (debtor)

    Args:
        expenses: Iterable of dicts shaped like
            {"payer": str, "amount": Decimal, "splits": [(user_id, Decimal), ...]}
        settlements: Iterable of dicts shaped like
            {"from": str, "to": str, "amount": Decimal}

    Returns:
        Dictionary mapping user_id -> net_balance, in the order users were
        first seen in the ledger. That order is the tie-break for
        min_cash_flow().

    Example:
        >>> calculate_balances([{"payer": "A", "amount": Decimal("90"),
        ...     "splits": [("A", Decimal("30")), ("B", Decimal("30")), ("C", Decimal("30"))]}])
        {'A': Decimal('60.00'), 'B': Decimal('-30.00'), 'C': Decimal('-30.00')}
    """
    balances: Dict[str, Decimal] = {}

    for expense in expenses:
        payer = expense["payer"]
        balances[payer] = balances.get(payer, Decimal('0')) + Decimal(expense["amount"])

        for user_id, owed in expense["splits"]:
            balances[user_id] = balances.get(user_id, Decimal('0')) - Decimal(owed)

    # fromUser paid toUser: the debtor's debt shrinks, the creditor's credit shrinks
    for settlement in settlements:
        amount = Decimal(settlement["amount"])
        from_user = settlement["from"]
        to_user = settlement["to"]
        balances[from_user] = balances.get(from_user, Decimal('0')) + amount
        balances[to_user] = balances.get(to_user, Decimal('0')) - amount

    return {user_id: round_decimal(balance) for user_id, balance in balances.items()}


def min_cash_flow(
    balances: Mapping[str, Decimal],
    tolerance: Decimal = TOLERANCE,
    max_iterations: Optional[int] = None,
) -> List[Dict]:
    """
    Resolve net balances into settling transfers.

    Edge Cases Handled:
    - Empty input, a single user, or all balances within tolerance: returns []
    - Only creditors or only debtors (unbalanced input): returns []

    Args:
        balances: Mapping user_id -> net_balance; iteration order breaks ties
        tolerance: Balances within this distance of zero count as settled
        max_iterations: Loop guard; defaults to debtors + creditors, one more than
            the transfer bound

    Returns:
        List of transfers: [{"from": str, "to": str, "amount": Decimal}, ...]

    Raises:
        RuntimeError: If the loop guard trips (malformed input)

    Example:
        >>> min_cash_flow({"A": Decimal("200"), "B": Decimal("-100"), "C": Decimal("-100")})
        [{'from': 'B', 'to': 'A', 'amount': Decimal('100.00')},
         {'from': 'C', 'to': 'A', 'amount': Decimal('100.00')}]
    """
    debtors = [[user_id, Decimal(balance)] for user_id, balance in balances.items() if balance < -tolerance]
    creditors = [[user_id, Decimal(balance)] for user_id, balance in balances.items() if balance > tolerance]

    if not debtors or not creditors:
        return []

    # list.sort is stable, also with reverse=True, so equal balances keep map order
    debtors.sort(key=lambda entry: entry[1])
    creditors.sort(key=lambda entry: entry[1], reverse=True)

    if max_iterations is None:
        max_iterations = len(debtors) + len(creditors)

    transfers = []
    iterations = 0
    i, j = 0, 0
    while i < len(debtors) and j < len(creditors):
        iterations += 1
        if iterations > max_iterations:
            raise RuntimeError(
                f"Settlement loop exceeded max_iterations ({max_iterations}). "
                f"This may indicate malformed input or rounding issues."
            )

        debtor = debtors[i]
        creditor = creditors[j]

        amount = min(abs(debtor[1]), creditor[1])
        transfers.append({
            "from": debtor[0],
            "to": creditor[0],
            "amount": round_decimal(amount),
        })

        debtor[1] += amount
        creditor[1] -= amount

        if abs(debtor[1]) < tolerance:
            i += 1
        if creditor[1] < tolerance:
            j += 1

    logger.debug(f"Resolved {len(debtors)} debtors and {len(creditors)} creditors into {len(transfers)} transfers")
    return transfers
