"""
Configuration management for yedxtract.

This module handles loading and accessing configuration values from config.yaml.
It keeps document conventions (type key names, label paths) and workbook
layout out of the code so they can be adjusted per project.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, List
import logging


class ConfigManager:
    """
    Manages configuration loading and access for yedxtract.
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._config = yaml.safe_load(f) or {}

            logging.info(f"Configuration loaded from {self.config_path}")

        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Failed to load configuration: {e}")
            # Fall back to default configuration
            self._config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "graphml": {
                "key_attribute": "yfiles.type",
                "key_value_template": "{kind}graphics",
                "include_nested_graphs": True,
                "label_paths": {
                    "node": ["y:NodeLabel", "[0]", "_"],
                    "edge": ["y:EdgeLabel", "[0]", "_"]
                }
            },
            "excel": {
                "content_sheet": "Content",
                "metadata_sheet": "Metadata",
                "clear_marker": "#NULL!",
                "default_column_width": 10,
                "column_widths": {
                    "type": 6,
                    "id": 6,
                    "source": 6,
                    "target": 6,
                    "unitType": 15,
                    "label": 30
                }
            },
            "export": {
                "fields": {
                    "node": {
                        "fill": ["y:Fill", "[0]", "$", "color"],
                        "shape": ["y:Shape", "[0]", "$", "type"]
                    },
                    "edge": {
                        "lineColor": ["y:LineStyle", "[0]", "$", "color"]
                    },
                    "common": {}
                }
            },
            "hashing": {
                "algorithm": "md5"
            },
            "paths": {
                "log_file": "yedxtract.log"
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "excel.clear_marker")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("excel.clear_marker")  # Returns "#NULL!"
            config.get("graphml.label_paths.node")  # Returns ["y:NodeLabel", "[0]", "_"]
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def key_attribute(self) -> str:
        """Get the key attribute naming the purpose of a <key> element."""
        return self.get("graphml.key_attribute", "yfiles.type")

    @property
    def key_value_template(self) -> str:
        """Get the template of the key attribute value, formatted with the unit kind."""
        return self.get("graphml.key_value_template", "{kind}graphics")

    @property
    def include_nested_graphs(self) -> bool:
        """Whether units inside group nodes are collected."""
        return self.get("graphml.include_nested_graphs", True)

    def label_path(self, unit_type: str) -> List[Any]:
        """
        Get the label path of a unit type.

        Args:
            unit_type: 'node' or 'edge'

        Returns:
            Path to the label text inside the unit's visual block
        """
        default = ["y:NodeLabel" if unit_type == "node" else "y:EdgeLabel", "[0]", "_"]
        return self.get(f"graphml.label_paths.{unit_type}", default)

    @property
    def content_sheet(self) -> str:
        """Get the name of the sheet holding the rows."""
        return self.get("excel.content_sheet", "Content")

    @property
    def metadata_sheet(self) -> str:
        """Get the name of the sheet holding provenance metadata."""
        return self.get("excel.metadata_sheet", "Metadata")

    @property
    def clear_marker(self) -> str:
        """Get the cell value that clears a field on import."""
        return self.get("excel.clear_marker", "#NULL!")

    @property
    def default_column_width(self) -> float:
        return self.get("excel.default_column_width", 10)

    @property
    def column_widths(self) -> Dict[str, float]:
        """Get the fixed leading columns and their widths, in order."""
        return self.get("excel.column_widths", {
            "type": 6,
            "id": 6,
            "source": 6,
            "target": 6,
            "unitType": 15,
            "label": 30
        })

    @property
    def export_fields(self) -> Dict[str, Any]:
        """Get the default field schema for exports."""
        fields = self.get("export.fields")
        if fields is None:
            fields = self._get_default_config()["export"]["fields"]
        return fields

    @property
    def hash_algorithm(self) -> str:
        return self.get("hashing.algorithm", "md5")

    @property
    def log_filename(self) -> str:
        """Get log file name."""
        return self.get("paths.log_file", "yedxtract.log")


# Global configuration instance
config = ConfigManager()
