"""Configuration dataclasses for the clipboard saver."""
from dataclasses import dataclass
from typing import Optional


@dataclass
class AppConfig:
    """Persisted user preferences.

    Attributes:
        directory (Optional[str]): Default save directory. ``None`` when neither the
            config file nor the environment provides one.
    """

    directory: Optional[str] = None
