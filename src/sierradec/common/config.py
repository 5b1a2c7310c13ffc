'''Global configuration system supporting JSON5 files and command-line overrides'''

import json5
import argparse
import logging
from pathlib import Path
from typing import Any

__all__ = [
    'Config',
    'get_config',
    'default_indent',
    'init_config',
]

logger = logging.getLogger(__name__)


class Config:
    '''Global configuration singleton'''

    _instance = None
    _initialized = False

    # Default configuration values
    _defaults = {
        'indent': 4,
        'function_prefix': 'f_',
        'var_prefix': 'v',
        'output_path': 'out.cairo_dec',
        'catalog': None,
        'log_level': 'WARNING',
    }

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self._config = self._defaults.copy()
            self._cli_overrides = {}
            self._initialized = True

    def load_file(self, filepath: str | Path, required: bool = False) -> bool:
        '''Load configuration from JSON5 file, warn when a required file is missing'''
        filepath = Path(filepath)
        if not filepath.exists():
            if required:
                logger.warning(f'Config file not found: {filepath}')

            return False

        try:
            with open(filepath, 'r', encoding = 'utf-8') as f:
                data = json5.loads(f.read())

        except (OSError, ValueError) as e:
            logger.warning(f'Failed to load config from {filepath}: {e}')
            return False

        if not isinstance(data, dict):
            logger.warning(f'Ignoring config {filepath}: top level must be an object')
            return False

        self._config.update(data)
        logger.debug(f'Loaded config from {filepath}')
        return True

    def load_defaults(self):
        '''Load default configuration files'''
        project_config = Path(__file__).parent.parent / 'config.json5'
        self.load_file(project_config)

    def parse_args(self, args: list[str] = None):
        '''Parse command-line arguments and override config'''
        parser = argparse.ArgumentParser(
            description = 'sierradec configuration',
            add_help = False
        )

        parser.add_argument(
            '--config',
            type = str,
            help = 'Path to config file'
        )

        parser.add_argument(
            '--indent',
            type = int,
            help = 'Spaces per nesting level'
        )

        parser.add_argument(
            '--catalog',
            type = str,
            help = 'Extra YAML catalog table'
        )

        # Parse known args, ignore unknown
        parsed, _ = parser.parse_known_args(args)

        if parsed.config:
            self.load_file(parsed.config, required = True)

        if parsed.indent is not None:
            self._cli_overrides['indent'] = parsed.indent

        if parsed.catalog:
            self._cli_overrides['catalog'] = parsed.catalog

    def get(self, key: str, default: Any = None) -> Any:
        '''Get configuration value'''
        # CLI overrides have highest priority
        if key in self._cli_overrides:
            return self._cli_overrides[key]

        if key in self._config:
            return self._config[key]

        return default

    def set(self, key: str, value: Any):
        '''Set configuration value at runtime'''
        self._config[key] = value

    def reset(self):
        '''Drop file values and overrides, back to built-in defaults'''
        self._config = self._defaults.copy()
        self._cli_overrides = {}

    @property
    def indent(self) -> int:
        return int(self.get('indent'))

    @property
    def function_prefix(self) -> str:
        return self.get('function_prefix')

    @property
    def var_prefix(self) -> str:
        return self.get('var_prefix')

    @property
    def output_path(self) -> str:
        return self.get('output_path')

    @property
    def catalog(self) -> str | None:
        return self.get('catalog')

    @property
    def log_level(self) -> str:
        return str(self.get('log_level')).upper()


# Global config instance
_config = Config()


def get_config() -> Config:
    '''Get global config instance'''
    return _config


def default_indent() -> str:
    '''Get default indent'''
    return ' ' * _config.indent


def init_config(args: list[str] = None):
    '''Initialize configuration system'''
    _config.load_defaults()
    if args is not None:
        _config.parse_args(args)


# Auto-load defaults on import
_config.load_defaults()
