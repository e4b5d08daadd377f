"""
Logging subsystem for ClinicLedger.

Modules:

- :mod:`ClinicLedger.log.log` – Logging setup, in-memory log tank and the Qt message bridge.
"""
