from decimal import Decimal

import pytest

from amortizer.session import CalculatorSession, serialize_result


def test_default_session_matches_five_year_loan():
    session = CalculatorSession()
    result = session.recalculate()

    assert session.total_months() == 60
    assert result.summary.payment_count == 60
    assert abs(result.summary.monthly_payment - Decimal("1887.12")) <= Decimal("0.01")
    assert result.summary.total_interest_saved == 0


def test_add_extra_payment_assigns_unique_ids():
    session = CalculatorSession()
    first = session.add_extra_payment("20000", "12")
    second = session.add_extra_payment(1000, 12)

    assert first is not None and second is not None
    assert first.id != second.id
    assert first.amount == Decimal("20000")
    assert first.month == 12
    assert session.extra_payments == [first, second]
    assert session.recalculate().summary.payment_count < 60


def test_rejected_extra_payment_sets_message_and_keeps_state():
    session = CalculatorSession()
    kept = session.add_extra_payment(500, 1)

    assert session.add_extra_payment(0, 3) is None
    assert "valid amount" in session.message
    assert session.add_extra_payment(500, 122) is None
    assert "between 1 and 121" in session.message
    assert session.extra_payments == [kept]


def test_successful_addition_clears_message():
    session = CalculatorSession()
    session.add_extra_payment(-1, 3)
    assert session.message

    session.add_extra_payment(100, 3)
    assert session.message == ""


def test_remove_and_dismiss():
    session = CalculatorSession()
    payment = session.add_extra_payment(100, 3)
    session.add_extra_payment(-1, 3)

    session.remove_extra_payment("unknown")
    assert session.extra_payments == [payment]
    assert session.message == ""

    session.add_extra_payment(-1, 3)
    session.dismiss_message()
    assert session.message == ""

    session.remove_extra_payment(payment.id)
    assert session.extra_payments == []


def test_invalid_loan_resets_result_and_rejects_extra_payments():
    session = CalculatorSession()
    session.update_loan(principal="-500")
    result = session.recalculate()

    assert result.schedule == []
    assert result.chart == []
    assert result.summary.payment_count == 0
    assert session.add_extra_payment(100, 1) is None
    assert session.extra_payments == []


def test_update_loan_rejects_unknown_fields():
    with pytest.raises(TypeError):
        CalculatorSession().update_loan(currency="COP")


def test_session_survives_serialization():
    session = CalculatorSession(principal="50000", annual_rate="7.5", term=24, term_unit="months")
    session.add_extra_payment("2500.50", 6)

    restored = CalculatorSession.from_dict(session.to_dict())

    assert restored.extra_payments == session.extra_payments
    assert restored.recalculate().schedule == session.recalculate().schedule
    assert CalculatorSession.from_dict(None) == CalculatorSession()


def test_serialize_result_uses_plain_numbers():
    session = CalculatorSession(principal=1200, annual_rate=0, term=3, term_unit="months")
    session.add_extra_payment(100, 2)
    data = serialize_result(session.recalculate())

    assert data["summary"]["payment_count"] == 3
    assert data["summary"]["original_principal"] == 1200.0
    assert data["schedule"][0]["extra_payment_applied"] is None
    assert data["schedule"][1]["extra_payment_applied"] == 100.0
    assert data["chart"][1]["extra_payment"] == 100.0
