"""
UI package: application actions, main application setup, and styling.

This package provides:

- :mod:`ClinicLedger.ui.actions` – Application-wide Qt signals and utility slots.
- :mod:`ClinicLedger.ui.app` – QApplication subclass and setup functions for high-DPI.
- :mod:`ClinicLedger.ui.main` – Main window composition.
- :mod:`ClinicLedger.ui.ui` – Styling constants for sizes and colors.
"""
