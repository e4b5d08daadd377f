"""Status codes and the exceptions raised by the report.

See :mod:`ClinicLedger.status.status`. Every exception carries a
:class:`~ClinicLedger.status.status.Status` whose message is shown to the user,
for example the error banner text after a failed expense fetch.
"""
