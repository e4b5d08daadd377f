"""
ClinicLedger data package: records, filters, aggregation, models, and views.

This package provides:

- :mod:`ClinicLedger.data.records` – Frozen expense, doctor and patient records parsed from the expense API.
- :mod:`ClinicLedger.data.filters` – Date range normalization, filter and pagination state, and list query building.
- :mod:`ClinicLedger.data.data` – Daily earnings aggregation (:func:`ClinicLedger.data.data.get_daily_earnings`) over the fetched page.
- :mod:`ClinicLedger.data.controller` – The report controller tying filters, pagination, fetching and aggregation together.
- :mod:`ClinicLedger.data.model` – Qt table model (:class:`ClinicLedger.data.model.expense.ExpensesModel`) for the expense table.
- :mod:`ClinicLedger.data.view` – Qt views for the earnings chart, filter bar, pagination bar and the report widget.
"""
