# tests/test_settings.py
"""
Tests for ClinicLedger.settings.lib and ClinicLedger.settings.locale.

Run:
    python -m unittest tests.test_settings
"""
import json
import unittest
from typing import Any, Dict, List, Tuple

from ClinicLedger.settings import lib, locale
from ClinicLedger.status import status
from ClinicLedger.ui.actions import signals
from tests.base import BaseTestCase


class ValidateSectionTests(unittest.TestCase):

    def setUp(self) -> None:
        self.schema = lib.REPORT_SCHEMA['metadata']['item_schema']
        self.valid: Dict[str, Any] = {
            'name': 'Expenses',
            'locale': 'en_IN',
            'page_size': 20,
            'chart_days': 7,
            'theme': 'dark',
        }

    def test_valid_metadata(self):
        lib._validate_section('metadata', self.valid, self.schema)

    def test_missing_required_field(self):
        del self.valid['locale']
        with self.assertRaises(ValueError):
            lib._validate_section('metadata', self.valid, self.schema)

    def test_page_size_must_be_an_option(self):
        self.valid['page_size'] = 15
        with self.assertRaises(ValueError):
            lib._validate_section('metadata', self.valid, self.schema)

    def test_bool_is_not_an_int(self):
        self.valid['chart_days'] = True
        with self.assertRaises(TypeError):
            lib._validate_section('metadata', self.valid, self.schema)

    def test_chart_days_minimum(self):
        self.valid['chart_days'] = 0
        with self.assertRaises(ValueError):
            lib._validate_section('metadata', self.valid, self.schema)

    def test_timeout_accepts_int_and_float(self):
        schema = lib.REPORT_SCHEMA['api']['item_schema']
        api = {
            'base_url': 'https://clinic.example/api',
            'web_url': 'https://clinic.example',
            'expenses_endpoint': '/expenses',
            'users_endpoint': '/users',
            'timeout': 30,
            'doctor_role': 1,
        }
        lib._validate_section('api', api, schema)
        api['timeout'] = 2.5
        lib._validate_section('api', api, schema)
        api['timeout'] = '30'
        with self.assertRaises(TypeError):
            lib._validate_section('api', api, schema)


class SettingsAPITests(BaseTestCase):

    def test_report_is_copied_from_template(self):
        self.assertTrue(lib.settings.report_path.exists())
        with lib.settings.report_template.open('r', encoding='utf-8') as f:
            template = json.load(f)
        self.assertEqual(lib.settings.report_data, template)

    def test_metadata_getitem(self):
        self.assertEqual(lib.settings['locale'], 'en_IN')
        self.assertEqual(lib.settings['page_size'], lib.DEFAULT_PAGE_SIZE)
        with self.assertRaises(KeyError):
            _ = lib.settings['not_a_key']

    def test_metadata_setitem_persists_and_emits(self):
        changes: List[Tuple[str, Any]] = []

        def on_changed(key: str, value: Any) -> None:
            changes.append((key, value))

        signals.metadataChanged.connect(on_changed)
        try:
            lib.settings['page_size'] = 50
        finally:
            signals.metadataChanged.disconnect(on_changed)

        self.assertEqual(changes, [('page_size', 50)])
        with lib.settings.report_path.open('r', encoding='utf-8') as f:
            self.assertEqual(json.load(f)['metadata']['page_size'], 50)

    def test_metadata_setitem_converts_numeric_strings(self):
        lib.settings['chart_days'] = '14'
        self.assertEqual(lib.settings['chart_days'], 14)

    def test_metadata_setitem_rejects_invalid(self):
        with self.assertRaises(ValueError):
            lib.settings['page_size'] = 15
        with self.assertRaises(ValueError):
            lib.settings['theme'] = 'blue'
        self.assertEqual(lib.settings['page_size'], lib.DEFAULT_PAGE_SIZE)

    def test_set_section(self):
        sections: List[str] = []

        def on_section(name: str) -> None:
            sections.append(name)

        api = lib.settings.get_section('api')
        api['base_url'] = 'https://clinic.example/api'

        signals.configSectionChanged.connect(on_section)
        try:
            lib.settings.set_section('api', api)
        finally:
            signals.configSectionChanged.disconnect(on_section)

        self.assertEqual(sections, ['api'])
        self.assertEqual(lib.settings.get_section('api')['base_url'], 'https://clinic.example/api')

    def test_get_section_returns_copy(self):
        api = lib.settings.get_section('api')
        api['base_url'] = 'changed'
        self.assertNotEqual(lib.settings.get_section('api')['base_url'], 'changed')

    def test_set_section_rejects_unknown_and_non_dict(self):
        with self.assertRaises(ValueError):
            lib.settings.set_section('ledger', {})
        with self.assertRaises(TypeError):
            lib.settings.set_section('api', ['not', 'a', 'dict'])  # type: ignore[arg-type]

    def test_set_section_rejects_invalid_field(self):
        api = lib.settings.get_section('api')
        del api['users_endpoint']
        with self.assertRaises(ValueError):
            lib.settings.set_section('api', api)

    def test_load_invalid_json(self):
        lib.settings.report_path.write_text('{broken', encoding='utf-8')
        with self.assertRaises(status.ReportConfigInvalidException):
            lib.settings.load_report()

    def test_load_missing_section(self):
        with lib.settings.report_path.open('w', encoding='utf-8') as f:
            json.dump({'api': lib.settings.get_section('api')}, f)
        with self.assertRaises(status.ReportConfigInvalidException):
            lib.settings.load_report()

    def test_load_missing_file(self):
        lib.settings.report_path.unlink()
        with self.assertRaises(status.ReportConfigNotFoundException):
            lib.settings.load_report()


class LocaleTests(unittest.TestCase):

    def test_currency_from_locale(self):
        self.assertEqual(locale.get_currency_from_locale('en_IN'), 'INR')
        self.assertEqual(locale.get_currency_from_locale('en_US'), 'USD')
        self.assertEqual(locale.get_currency_from_locale('en'), 'INR')
        self.assertEqual(locale.get_currency_from_locale('xx_QQ'), 'INR')

    def test_format_currency_value(self):
        value = locale.format_currency_value(1500, 'en_IN')
        self.assertIn('₹', value)
        self.assertIn('1,500', value)

        self.assertIn('$', locale.format_currency_value(12.5, 'en_US'))

    def test_unknown_locale_falls_back(self):
        self.assertEqual(
            locale.format_currency_value(10, 'zz_ZZ'),
            locale.format_currency_value(10, locale.DEFAULT_LOCALE),
        )


if __name__ == '__main__':
    unittest.main()
