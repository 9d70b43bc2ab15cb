from datetime import date
from types import SimpleNamespace

from export import expenses_to_csv


def _expense(amount, description=None, on=date(2024, 3, 5), category="Food & Dining", method="Credit Card"):
    return SimpleNamespace(date=on, amount=amount, category=category, payment_method=method, description=description)


def test_header_only_when_empty():
    assert expenses_to_csv([]) == "Date,Amount,Category,Payment Method,Description"


def test_rows_in_given_order():
    csv_text = expenses_to_csv([
        _expense(12.5, "Lunch"),
        _expense(100.0, on=date(2024, 3, 1), category="Travel", method="Cash"),
    ])

    assert csv_text.split("\n") == [
        "Date,Amount,Category,Payment Method,Description",
        '2024-03-05,12.5,"Food & Dining","Credit Card","Lunch"',
        '2024-03-01,100,"Travel","Cash",""',
    ]


def test_embedded_quotes_are_doubled():
    line = expenses_to_csv([_expense(3.25, 'the "good" coffee')]).split("\n")[1]

    assert line.endswith('"the ""good"" coffee"')
