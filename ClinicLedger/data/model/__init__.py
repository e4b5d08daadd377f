"""Qt table models for the ClinicLedger application.

This subpackage provides the table model used to display a fetched page of expense
records (ExpensesModel) within the expense report table view.
"""
