"""Settings package: report configuration and locale-aware formatting.

Modules:
    - :mod:`ClinicLedger.settings.lib` – report.json schema, validation and the SettingsAPI singleton.
    - :mod:`ClinicLedger.settings.locale` – Babel based currency formatting.
"""
