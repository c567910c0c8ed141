"""Loan amortization calculator with extraordinary payments."""
