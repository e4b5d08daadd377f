"""
Core package for ClinicLedger providing essential functionality.

This package includes:

- :mod:`ClinicLedger.core.session` – Session access and the session providers consulted before every fetch.
- :mod:`ClinicLedger.core.service` – Clinic expense API integration with asynchronous list, delete and doctor lookups.
"""
