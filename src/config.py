"""
Configuration handling for the club back-office engine.
"""
import os
import logging
import configparser
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()
# Load environment variables
DATABASE_TYPE = os.getenv("CLUB_DB_TYPE", "sqlite")
DATABASE_NAME = os.getenv("CLUB_DB_NAME", "data/club_pos.db")
POSTGRES_HOST = os.getenv("POSTGRES_HOST")
POSTGRES_PORT = os.getenv("POSTGRES_PORT")
POSTGRES_USER = os.getenv("POSTGRES_USER")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD")

class Config:
    """Configuration manager for the club back-office engine."""

    def __init__(self, config_file='config.ini'):
        """
        Initialize configuration from config file.
        """
        self.config = configparser.ConfigParser()

        # Set default values
        self._set_defaults()

        # Try to read from config file
        config_path = Path(config_file)
        if config_path.exists():
            self.config.read(config_path, encoding='utf-8')
            self._setup_logging()
        else:
            print(f"Warning: Config file {config_file} not found. Using defaults.")

    def _set_defaults(self):
        """Set default configuration values."""
        self.config['DATABASE'] = {
            'type': DATABASE_TYPE,
            'name': DATABASE_NAME,
            'host': POSTGRES_HOST or '',
            'port': POSTGRES_PORT or '',
            'user': POSTGRES_USER or '',
            'password': POSTGRES_PASSWORD or ''
        }

        self.config['LOGGING'] = {
            'level': 'INFO',
            'file': 'logs/club_pos.log'
        }

        self.config['PATHS'] = {
            'output_dir': 'data/output'
        }

        # Initial store settings written by the seed command
        self.config['STORE'] = {
            'hourly_set_fee': '5000',
            'douhan_fee': '3000',
            'douhan_back_rate': '0.5',
            'service_fee': '0.1',
            'tax_rate': '0.1',
            'open': '20:00',
            'close': '05:00'
        }

    def _setup_logging(self):
        """Configure logging based on settings."""
        log_config = self.config['LOGGING']
        log_level = getattr(logging, log_config.get('level', 'INFO').upper())
        log_file = log_config.get('file', 'logs/club_pos.log')

        # Create directory for log file if it doesn't exist
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        # Configure logging
        logging.basicConfig(
            level=log_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[
                logging.FileHandler(log_file, encoding='utf-8'),
                logging.StreamHandler()
            ]
        )

    def get_database_config(self):
        """
        Get database configuration.

        """
        return {
            'type': self.config['DATABASE'].get('type'),
            'name': self.config['DATABASE'].get('name'),
            'host': self.config['DATABASE'].get('host'),
            'port': self.config['DATABASE'].get('port'),
            'user': self.config['DATABASE'].get('user'),
            'password': self.config['DATABASE'].get('password')
        }

    def get_output_path(self, filename=None):
        """
        Get output directory or file path.

        """
        output_dir = self.config['PATHS'].get('output_dir', 'data/output')

        # Create directory if it doesn't exist
        if not os.path.exists(output_dir):
            os.makedirs(output_dir)

        if filename:
            return os.path.join(output_dir, filename)
        return output_dir

    def get_store_defaults(self):
        """
        Get the initial store settings as a plain dict.
        """
        store = self.config['STORE']
        return {
            'hourly_set_fee': store.getint('hourly_set_fee', 5000),
            'douhan_fee': store.getint('douhan_fee', 3000),
            'douhan_back_rate': store.getfloat('douhan_back_rate', 0.5),
            'service_fee': store.getfloat('service_fee', 0.1),
            'tax_rate': store.getfloat('tax_rate', 0.1),
            'business_hours': {
                'open': store.get('open', '20:00'),
                'close': store.get('close', '05:00')
            }
        }
