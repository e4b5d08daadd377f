"""Settings library for the report configuration.

Provides:
    - Schema validation and enforcement for the report.json structure.
    - Loading, saving and managing application settings.
    - Constants for pagination and data schemas.
"""

import json
import logging
import pathlib
import shutil
from typing import Dict, Any, Optional, List

from PySide6 import QtCore, QtWidgets

from ..status import status

app_name: str = 'ClinicLedger'

PAGE_SIZE_OPTIONS: tuple[int, ...] = (10, 20, 50)
DEFAULT_PAGE_SIZE: int = PAGE_SIZE_OPTIONS[0]

DAILY_EARNINGS_COLUMNS: List[str] = ['day', 'label', 'total']

THEMES: List[str] = ['light', 'dark']

METADATA_KEYS: List[str] = [
    'name',
    'locale',
    'page_size',
    'chart_days',
    'theme',
]

REPORT_SCHEMA: Dict[str, Any] = {
    'api': {
        'type': dict,
        'required': True,
        'item_schema': {
            'base_url': {'type': str, 'required': True},
            'web_url': {'type': str, 'required': True},
            'expenses_endpoint': {'type': str, 'required': True},
            'users_endpoint': {'type': str, 'required': True},
            'timeout': {'type': (int, float), 'required': True, 'min': 0},
            'doctor_role': {'type': int, 'required': True},
        }
    },
    'metadata': {
        'type': dict,
        'required': True,
        'item_schema': {
            'name': {'type': str, 'required': True},
            'locale': {'type': str, 'required': True},
            'page_size': {'type': int, 'required': True, 'allowed_values': list(PAGE_SIZE_OPTIONS)},
            'chart_days': {'type': int, 'required': True, 'min': 1},
            'theme': {'type': str, 'required': True, 'allowed_values': THEMES},
        }
    },
}


def _validate_section(section_name: str, section: Dict[str, Any], item_schema: Dict[str, Any]) -> None:
    """Validate a single report.json section against its item schema.

    Args:
        section_name: Name of the section, used in error messages.
        section: The section data.
        item_schema: Mapping of field names to type, presence and value constraints.

    Raises:
        TypeError: If a field is of the wrong type.
        ValueError: If a required field is missing or a value is out of range.
    """
    logging.debug(f'Validating "{section_name}" section.')
    for field, specs in item_schema.items():
        if field not in section:
            if specs.get('required'):
                msg = f'"{section_name}" is missing "{field}".'
                logging.error(msg)
                raise ValueError(msg)
            continue

        value = section[field]
        # bool is an int subclass, never a valid number here
        if isinstance(value, bool) or not isinstance(value, specs['type']):
            msg = f'"{section_name}.{field}" must be {specs["type"]}, got {type(value)}.'
            logging.error(msg)
            raise TypeError(msg)

        allowed = specs.get('allowed_values')
        if allowed is not None and value not in allowed:
            msg = f'"{section_name}.{field}" must be one of {allowed}, got {value!r}.'
            logging.error(msg)
            raise ValueError(msg)

        minimum = specs.get('min')
        if minimum is not None and value < minimum:
            msg = f'"{section_name}.{field}" must be >= {minimum}, got {value!r}.'
            logging.error(msg)
            raise ValueError(msg)


class ConfigPaths:
    """Manage application file paths and ensure default templates and directories exist."""

    def __init__(self) -> None:
        QtWidgets.QApplication.setApplicationName(app_name)
        QtWidgets.QApplication.setOrganizationName('')
        logging.debug(f'Setting application name: {app_name}')

        p = QtCore.QStandardPaths.writableLocation(QtCore.QStandardPaths.AppDataLocation)
        app_data_dir = pathlib.Path(p)
        logging.debug(f'Using app data directory: {app_data_dir}')

        self.template_dir: pathlib.Path = pathlib.Path(__file__).parent.parent / 'config'
        self.report_template: pathlib.Path = self.template_dir / 'report.json.template'

        self.config_dir: pathlib.Path = app_data_dir / 'config'
        self.auth_dir: pathlib.Path = self.config_dir / 'auth'

        self.report_path: pathlib.Path = self.config_dir / 'report.json'
        self.session_path: pathlib.Path = self.auth_dir / 'session.json'

        self._verify_and_prepare()

    def _verify_and_prepare(self) -> None:
        """Verify the template exists and prepare the configuration directories and files.

        Raises:
            FileNotFoundError: If the template directory or file is missing.
        """
        logging.debug(f'Verifying required directories and templates in {self.template_dir}')
        if not self.template_dir.exists():
            msg: str = f'Missing template directory: {self.template_dir}'
            logging.error(msg)
            raise FileNotFoundError(msg)
        if not self.report_template.exists():
            msg = f'Missing report template: {self.report_template}'
            logging.error(msg)
            raise FileNotFoundError(msg)

        if not self.config_dir.exists():
            logging.debug(f'Creating config directory: {self.config_dir}')
            self.config_dir.mkdir(parents=True, exist_ok=True)

        if not self.auth_dir.exists():
            logging.debug(f'Creating auth directory: {self.auth_dir}')
            self.auth_dir.mkdir(parents=True, exist_ok=True)

        # A valid config exists even before the user has set one up
        if not self.report_path.exists():
            logging.debug(f'Copying default report config from template to {self.report_path}')
            shutil.copy(self.report_template, self.report_path)


class SettingsAPI(ConfigPaths):
    """
    Provides an interface to get/set/save report.json sections.
    """

    def __init__(self, report_path: Optional[str] = None) -> None:
        """Initialize SettingsAPI and load the report configuration.

        Args:
            report_path: Optional path to a custom report.json file.
        """
        super().__init__()

        self.report_path: pathlib.Path = pathlib.Path(report_path) if report_path else self.report_path

        self.report_data: Dict[str, Any] = {k: {} for k in REPORT_SCHEMA.keys()}

        self.init_data()

    def __getitem__(self, key: str) -> Any:
        """Retrieve a metadata value using dictionary-style access.

        Raises:
            KeyError: If key is not in METADATA_KEYS.
            RuntimeError: If metadata section is missing from report_data.
        """
        if key not in METADATA_KEYS:
            raise KeyError(f'Invalid metadata key: {key}, must be one of {METADATA_KEYS}')

        if 'metadata' not in self.report_data:
            raise RuntimeError('Malformed report data, missing "metadata" section.')

        _type = REPORT_SCHEMA['metadata']['item_schema'][key]['type']
        v = self.report_data['metadata'].get(key)

        if not isinstance(v, _type):
            logging.error(f'Metadata key "{key}" is not of type {_type}, got {type(v)}.')
            return None

        return v

    def __setitem__(self, key: str, value: Any) -> None:
        """Assign a metadata value using dictionary-style access and persist it.

        Raises:
            KeyError: If key is not in METADATA_KEYS.
            ValueError: If the value fails validation.
        """
        if key not in METADATA_KEYS:
            raise KeyError(f'Invalid metadata key: {key}, must be one of {METADATA_KEYS}')

        if 'metadata' not in self.report_data:
            raise RuntimeError('Malformed report data, missing "metadata" section.')

        _type = REPORT_SCHEMA['metadata']['item_schema'][key]['type']
        if not isinstance(value, _type):
            logging.warning(f'Metadata key "{key}" is not of type {_type}, got {type(value)}.')
            if _type == str:
                value = str(value)
            elif _type == int:
                try:
                    value = int(value)
                except ValueError:
                    logging.error(f'Cannot convert "{value}" to int.')
                    raise

        new_data = dict(self.report_data['metadata'])
        new_data[key] = value
        _validate_section('metadata', new_data, REPORT_SCHEMA['metadata']['item_schema'])

        self.report_data['metadata'] = new_data
        self.save_section('metadata')

        from ..ui.actions import signals
        signals.metadataChanged.emit(key, value)

    @QtCore.Slot()
    def init_data(self) -> None:
        """Reload report data, emitting UI update signals."""
        self.load_report()

        from ..ui.actions import signals
        for section in REPORT_SCHEMA.keys():
            signals.configSectionChanged.emit(section)

        for k, v in self.report_data.get('metadata', {}).items():
            signals.metadataChanged.emit(k, v)

    def load_report(self) -> Dict[str, Any]:
        """Load report.json from disk and validate against schema.

        Returns:
            The loaded report data dictionary.

        Raises:
            status.ReportConfigNotFoundException: If report.json file is missing.
            status.ReportConfigInvalidException: If JSON parsing or validation fails.
        """
        logging.debug(f'Loading report config from "{self.report_path}"')
        if not self.report_path.exists():
            raise status.ReportConfigNotFoundException

        try:
            with self.report_path.open('r', encoding='utf-8') as f:
                data: Dict[str, Any] = json.load(f)
            self.validate_report_data(data)
        except status.BaseStatusException:
            raise
        except Exception as ex:
            raise status.ReportConfigInvalidException(str(ex)) from ex

        self.report_data = data
        return self.report_data

    def validate_report_data(self, data: Dict[str, Any] = None) -> None:
        """Validate report data against REPORT_SCHEMA.

        Args:
            data (dict, optional): Report data to validate. Defaults to self.report_data.

        Raises:
            RuntimeError: If data is empty.
            status.ReportConfigInvalidException: If a required section is missing or has the wrong type.
            TypeError, ValueError: If a field fails validation.
        """
        if data is None:
            data = self.report_data
        if not data:
            raise RuntimeError('Report data is empty.')

        logging.debug('Validating report data against schema.')
        for field, specs in REPORT_SCHEMA.items():
            if specs.get('required') and field not in data:
                raise status.ReportConfigInvalidException(f'Missing required field: {field}')

            if field not in data:
                continue

            if not isinstance(data[field], specs['type']):
                raise status.ReportConfigInvalidException(
                    f'Field "{field}" must be {specs["type"]}, got {type(data[field])}.')

            _validate_section(field, data[field], specs['item_schema'])

        logging.debug('Report data is valid.')

    def get_section(self, section_name: str) -> Dict[str, Any]:
        """Retrieve a copy of a report.json section.

        Raises:
            KeyError: If section_name is not in report_data.
        """
        return self.report_data[section_name].copy()

    def set_section(self, section_name: str, new_data: Dict[str, Any]) -> None:
        """Replace, validate and persist a configuration section.

        Raises:
            ValueError: If section_name is unrecognized or validation fails.
            TypeError: If a field has the wrong type.
        """
        if section_name not in REPORT_SCHEMA:
            msg: str = f'Unknown section_name for set: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        if not isinstance(new_data, dict):
            msg = f'{section_name} must be a dict.'
            logging.error(msg)
            raise TypeError(msg)

        try:
            _validate_section(section_name, new_data, REPORT_SCHEMA[section_name]['item_schema'])
        except (ValueError, TypeError) as e:
            logging.error(f'Validation error on set_section("{section_name}"): {e}')
            raise

        self.report_data[section_name] = dict(new_data)
        self.save_section(section_name)

        from ..ui.actions import signals
        signals.configSectionChanged.emit(section_name)

    def save_section(self, section_name: str) -> None:
        """Persist a single configuration section to report.json.

        Raises:
            ValueError: If section_name is not recognized.
        """
        if section_name not in self.report_data:
            msg: str = f'Unknown section_name for save: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        with self.report_path.open('r', encoding='utf-8') as f:
            original_data: Dict[str, Any] = json.load(f)

        new_data: Dict[str, Any] = original_data.copy()
        new_data[section_name] = self.report_data[section_name]

        logging.debug(f'Saving section "{section_name}" to "{self.report_path}"')
        with self.report_path.open('w', encoding='utf-8') as f:
            json.dump(new_data, f, indent=4, ensure_ascii=False)


settings: SettingsAPI = SettingsAPI()
