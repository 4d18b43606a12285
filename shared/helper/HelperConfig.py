"""Central configuration helper for the RAGFlow document bridge."""

import logging
import os
from typing import Any

# env key holding the remote ids of the datasets the runner mirrors
DATASET_IDS_KEY = "SYNC_DATASET_IDS"


class HelperConfig:
    """Reads all bridge settings from environment variables and hands out the application logger.

    Unset and empty variables are treated the same: both fall back to the
    default, and both are an error when no default is given.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    ##########################################
    ############### RAW ACCESS ###############
    ##########################################

    @staticmethod
    def _read(key: str) -> str | None:
        raw = os.getenv(key.upper())
        if raw is None or not raw.strip():
            return None
        return raw.strip()

    @staticmethod
    def _missing(key: str) -> ValueError:
        return ValueError(f"Environment variable '{key.upper()}' is not set.")

    ##########################################
    ############# TYPED GETTERS ##############
    ##########################################

    def get_string_val(self, key: str, default: str | None = None) -> str:
        """Read a string setting, e.g. RAG_RAGFLOW_BASE_URL.

        Raises:
            ValueError: If the variable is not set and no default is provided.
        """
        raw = self._read(key)
        if raw is None:
            if default is None:
                raise self._missing(key)
            return default
        return raw

    def get_number_val(self, key: str, default: float | int | None = None) -> float | int:
        """Read a numeric setting, e.g. RAG_TIMEOUT. Integral values come back as int.

        Raises:
            ValueError: If the variable is not set and no default is provided, or is not a number.
        """
        raw = self._read(key)
        if raw is None:
            if default is None:
                raise self._missing(key)
            return default
        try:
            number = float(raw)
        except ValueError:
            raise ValueError(f"Environment variable '{key.upper()}' is not a valid number: '{raw}'.")
        return int(number) if number.is_integer() and "." not in raw else number

    def get_bool_val(self, key: str, default: bool | None = None) -> bool:
        raw = self._read(key)
        if raw is None:
            if default is None:
                raise self._missing(key)
            return default
        return raw.lower() in ("true", "1", "yes", "on")

    def get_list_val(self, key: str, default: list | None = None, separator: str = ",", element_type: type = str) -> list:
        """Read a list setting written as "[elem1,elem2,...]", e.g. SYNC_DATASET_IDS=[ds_1,ds_2].

        Args:
            key (str): Environment variable name (case-insensitive).
            default (list | None): Fallback value if the variable is not set.
            separator (str): The delimiter between elements.
            element_type (type): The type each element is cast to.

        Returns:
            list: The elements, blanks dropped.

        Raises:
            ValueError: If the variable is not set and no default is provided.
            ValueError: If the value is not bracketed or an element cannot be cast.
        """
        raw = self._read(key)
        if raw is None:
            if default is None:
                raise self._missing(key)
            return default
        if not raw.startswith("[") or not raw.endswith("]"):
            raise ValueError(f"Environment variable '{key.upper()}' must be in the format '[elem1{separator}elem2{separator}...]'. Got: '{raw}'")
        elements = [v.strip() for v in raw[1:-1].split(separator) if v.strip()]
        try:
            return [element_type(elem) for elem in elements]
        except ValueError as e:
            raise ValueError(f"Environment variable '{key.upper()}' contains invalid elements: {e}. Type set to {element_type.__name__}. Got: '{raw}'")

    def get_typed_val(self, key: str, val_type: str = "string", default: Any = None) -> Any:
        """Read a setting by the value type an EnvConfig declares ("string", "number", "bool", "list").

        Raises:
            ValueError: If the type is unknown or the value is missing or invalid.
        """
        match val_type:
            case "string":
                return self.get_string_val(key, default=default)
            case "number":
                return self.get_number_val(key, default=default)
            case "bool":
                return self.get_bool_val(key, default=default)
            case "list":
                return self.get_list_val(key, default=default)
            case _:
                raise ValueError(f"Unsupported config value type '{val_type}' for env key '{key.upper()}'.")

    ##########################################
    ############### SYNC SCOPE ###############
    ##########################################

    def get_dataset_ids(self) -> list[str]:
        """Remote ids of the datasets to mirror, in configured order and without duplicates."""
        return list(dict.fromkeys(self.get_list_val(DATASET_IDS_KEY, default=[])))

    def get_logger(self) -> logging.Logger:
        return self._logger
