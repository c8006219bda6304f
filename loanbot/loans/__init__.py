"""Loan record lifecycle.

The loans layer turns chat text into commands, validates borrow requests and date arguments, and
runs the create/query/cancel/early-return operations against a `LoanRecordStore`.
"""
