"""JSON web API for the loan amortizer."""
