"""Qt views for the ClinicLedger application.

This subpackage provides the widgets of the expense report:

- EarningsChart: daily earnings bar chart of the rolling window
- FilterBar and PaginationBar: filter and page navigation controls
- ExpensesView and ExpenseReportWidget: the expense table with row actions and the composed report
"""
