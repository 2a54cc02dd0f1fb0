"""
Transaction Summaries

DESIGN DECISION: All numbers shown to the user, and all numbers
handed to the AI as context, come from these deterministic functions.
The AI never computes totals itself.
"""

from fintrack.models.finance import (
    Category,
    CategoryBreakdown,
    CategoryColor,
    FinancialSummary,
    Transaction,
    TransactionType,
)


def summarize(transactions: list[Transaction]) -> FinancialSummary:
    """Total income, total expense and count for a set of transactions."""
    summary = FinancialSummary()
    for t in transactions:
        if t.type == TransactionType.INCOME:
            summary.total_income += t.amount
        else:
            summary.total_expense += t.amount
        summary.transaction_count += 1
    return summary


def expense_breakdown(
    transactions: list[Transaction],
    categories: list[Category],
) -> list[CategoryBreakdown]:
    """
    Expense totals grouped by category id, in first-seen order.
    
    Ids with no matching category are labelled with the raw id.
    """
    totals: dict[str, float] = {}
    for t in transactions:
        if t.type != TransactionType.EXPENSE:
            continue
        totals[t.category] = totals.get(t.category, 0.0) + t.amount
    
    by_id = {c.id: c for c in categories}
    breakdown = []
    for category_id, total in totals.items():
        category = by_id.get(category_id)
        breakdown.append(CategoryBreakdown(
            category_id=category_id,
            name=category.name if category else category_id,
            total=total,
            color=category.palette_color if category else CategoryColor.GRAY,
        ))
    return breakdown


def _format_amount(value: float) -> str:
    # 12.0 -> "12", 12.5 -> "12.5"
    return str(int(value)) if value.is_integer() else str(value)


def format_transaction_lines(transactions: list[Transaction]) -> str:
    """
    One line per transaction: "- <date>: <title> (<category>) - <+|-><amount>".
    """
    lines = []
    for t in transactions:
        sign = "+" if t.type == TransactionType.INCOME else "-"
        lines.append(
            f"- {t.date.isoformat()}: {t.title} ({t.category}) - {sign}{_format_amount(t.amount)}"
        )
    return "\n".join(lines)
