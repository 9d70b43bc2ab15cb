from typing import Iterable

CSV_HEADERS = ["Date", "Amount", "Category", "Payment Method", "Description"]
CSV_FILENAME = "expenses.csv"


def _format_amount(amount) -> str:
    amount = float(amount)
    return str(int(amount)) if amount.is_integer() else repr(amount)


def _quote(value) -> str:
    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


def expenses_to_csv(expenses: Iterable) -> str:
    """Render expenses as CSV text, one line per expense in the given order."""
    lines = [",".join(CSV_HEADERS)]
    for expense in expenses:
        lines.append(
            ",".join(
                [
                    expense.date.strftime("%Y-%m-%d"),
                    _format_amount(expense.amount),
                    _quote(expense.category),
                    _quote(expense.payment_method),
                    _quote(expense.description),
                ]
            )
        )
    return "\n".join(lines)
