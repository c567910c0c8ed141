import logging
import os

from flask import Flask, jsonify, request, session

from amortizer.data_models import ExtraPayment
from amortizer.engine import calculate
from amortizer.session import CalculatorSession, serialize_result
from amortizer.validation import InvalidExtraPayment, InvalidLoanParameters, validate_extra_payment, validate_loan_parameters

logging.basicConfig(level=os.environ.get("AMORTIZER_LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")

SESSION_KEY = "calculator"


def _load_session() -> CalculatorSession:
    return CalculatorSession.from_dict(session.get(SESSION_KEY))


def _save_session(calculator: CalculatorSession) -> None:
    session[SESSION_KEY] = calculator.to_dict()
    session.modified = True


def _state_response(calculator: CalculatorSession, status: int = 200):
    payload = {"session": calculator.to_dict()}
    payload.update(serialize_result(calculator.recalculate()))
    return jsonify(payload), status


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _loan_fields(form: dict) -> dict:
    fields = {}
    for name in ("principal", "annual_rate", "term", "term_unit"):
        if name in form:
            fields[name] = form[name]
    return fields


@app.get("/api/calculation")
def get_calculation():
    return _state_response(_load_session())


@app.put("/api/loan")
def update_loan():
    calculator = _load_session()
    calculator.update_loan(**_loan_fields(_json_body()))
    _save_session(calculator)
    return _state_response(calculator)


@app.post("/api/extra-payments")
def add_extra_payment():
    data = _json_body()
    calculator = _load_session()
    payment = calculator.add_extra_payment(data.get("amount"), data.get("month"))
    _save_session(calculator)
    if payment is None:
        return _state_response(calculator, status=400)
    return _state_response(calculator, status=201)


@app.delete("/api/extra-payments/<payment_id>")
def remove_extra_payment(payment_id: str):
    calculator = _load_session()
    calculator.remove_extra_payment(payment_id)
    _save_session(calculator)
    return _state_response(calculator)


@app.delete("/api/message")
def dismiss_message():
    calculator = _load_session()
    calculator.dismiss_message()
    _save_session(calculator)
    return _state_response(calculator)


@app.post("/api/amortization")
def amortization():
    """Stateless computation: loan inputs and extra payments in one request."""
    data = _json_body()
    fields = _loan_fields(data)
    try:
        total_months = validate_loan_parameters(
            fields.get("principal"),
            fields.get("annual_rate"),
            fields.get("term"),
            fields.get("term_unit", "months"),
        ).total_months
    except InvalidLoanParameters:
        total_months = 0

    extra_payments = []
    # An invalid loan yields an empty result; its extra payments are not checked.
    items = (data.get("extra_payments") or []) if total_months else []
    for index, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            return jsonify({"message": "Extra payments must be objects with amount and month"}), 400
        try:
            amount, month = validate_extra_payment(item.get("amount"), item.get("month"), total_months)
        except InvalidExtraPayment as exc:
            logger.info("Rejected extra payment #%d: %s", index, exc)
            return jsonify({"message": str(exc)}), 400
        extra_payments.append(ExtraPayment(id=str(item.get("id", index)), amount=amount, month=month))

    result = calculate(
        fields.get("principal"),
        fields.get("annual_rate"),
        fields.get("term"),
        fields.get("term_unit", "months"),
        extra_payments,
    )
    return jsonify(serialize_result(result))


if __name__ == "__main__":
    print("Starting Loan Amortizer web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
