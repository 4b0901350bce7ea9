"""Configuration manager for voiceplayer."""
import logging
import os
from typing import Any, Dict, Optional
import yaml

from voiceplayer.core.interfaces import PlayerOptions

# Keys of the ``player`` section that map onto PlayerOptions fields
_PLAYER_OPTION_KEYS = {
    'deafen_on_join',
    'leave_on_empty',
    'timeout',
    'cache',
    'cache_path',
}


class ConfigManager:
    """
    Configuration manager for voiceplayer.

    Handles loading and accessing configuration values from the config file.
    """

    def __init__(self, config_path: str = "config/config.yaml"):
        """
        Initialize the ConfigManager.

        Args:
            config_path: Path to the configuration file

        Raises:
            FileNotFoundError: If the configuration file does not exist
            yaml.YAMLError: If the configuration file is not valid YAML
        """
        self.logger = logging.getLogger("voiceplayer.config")
        self.config_path = config_path
        self.config: Dict[str, Any] = {}

        self._load_config()

    def _load_config(self) -> None:
        """
        Load the configuration from the config file.

        Raises:
            FileNotFoundError: If the configuration file does not exist
            yaml.YAMLError: If the configuration file is not valid YAML
        """
        if not os.path.exists(self.config_path):
            example_path = f"{self.config_path}.example"
            if os.path.exists(example_path):
                self.logger.error(
                    f"Configuration file {self.config_path} not found. "
                    f"Please copy {example_path} to {self.config_path} and update it."
                )
            else:
                self.logger.error(f"Configuration file {self.config_path} not found.")
            raise FileNotFoundError(f"Configuration file {self.config_path} not found")

        try:
            with open(self.config_path, 'r', encoding='utf-8') as config_file:
                self.config = yaml.safe_load(config_file) or {}
                self.logger.debug(f"Loaded configuration from {self.config_path}")
        except yaml.YAMLError as e:
            self.logger.error(f"Error parsing configuration file: {e}")
            raise

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: The configuration key (dot notation for nested keys)
            default: Default value to return if the key is not found

        Returns:
            The configuration value or the default value if not found
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                self.logger.debug(f"Configuration key '{key}' not found, using default: {default}")
                return default

        return value

    def get_discord_token(self) -> str:
        """
        Get the Discord bot token.

        Returns:
            The Discord bot token

        Raises:
            ValueError: If the Discord bot token is not set
        """
        token = self.get('discord.token')
        if not token or token == "YOUR_DISCORD_BOT_TOKEN_HERE":
            self.logger.error("Discord bot token not set in configuration")
            raise ValueError("Discord bot token not set in configuration")
        return token

    def get_command_prefix(self) -> str:
        """Get the command prefix used by the bot."""
        return self.get('discord.command_prefix', '!')

    def get_log_level(self) -> str:
        """
        Get the logging level.

        Returns:
            The logging level
        """
        return self.get('logging.level', 'INFO')

    def get_log_file(self) -> Optional[str]:
        """
        Get the log file path.

        Returns:
            The log file path or None if not set
        """
        return self.get('logging.file', None)

    def get_log_max_size(self) -> int:
        """
        Get the maximum log file size.

        Returns:
            The maximum log file size in bytes
        """
        return self.get('logging.max_size', 10485760)  # 10 MB

    def get_log_backup_count(self) -> int:
        """
        Get the number of backup log files to keep.

        Returns:
            The number of backup log files
        """
        return self.get('logging.backup_count', 5)

    def get_player_options(self) -> Dict[str, Any]:
        """
        Get the process-wide player defaults from the ``player`` section.

        Unknown keys are logged and dropped so a stale config file does not
        prevent the bot from starting.

        Returns:
            Dictionary suitable for ``PlayerOptions.merge``
        """
        section = self.get('player', {}) or {}
        if not isinstance(section, dict):
            self.logger.warning(f"Invalid 'player' section, expected a mapping: {section!r}")
            return {}

        options = {}
        for key, value in section.items():
            if key in _PLAYER_OPTION_KEYS:
                options[key] = value
            else:
                self.logger.warning(f"Unknown player option '{key}' ignored")

        timeout = options.get('timeout')
        if timeout is not None and (not isinstance(timeout, (int, float)) or timeout < 0):
            self.logger.warning(f"Invalid player timeout: {timeout}, using default {PlayerOptions.timeout}")
            del options['timeout']

        return options
