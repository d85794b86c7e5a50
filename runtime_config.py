"""Helper-Funktionen, um statische und lokale Konfiguration zu trennen.

Die Anwendung liest ``config.ini`` als Basis. Lokale Abweichungen (z. B. ein
anderer Log-Level auf dem Entwicklungsrechner) gehören in
``config.runtime.ini`` neben der Basisdatei. So bleiben Kommentare in der
Hauptdatei erhalten und Versionsstände lassen sich sauber nachverfolgen.
Über die Umgebungsvariable ``CALCULATOR_CONFIG`` kann eine andere Basisdatei
gewählt werden.
"""

from __future__ import annotations

import configparser
import logging
import os
from pathlib import Path
from typing import Optional

CONFIG_MAIN_PATH = Path(__file__).resolve().parent / "config.ini"

logger = logging.getLogger(__name__)


def config_main_path() -> Path:
    """Pfad der Basiskonfiguration (Umgebungsvariable hat Vorrang)."""
    override = os.getenv("CALCULATOR_CONFIG")
    if override and override.strip():
        return Path(override.strip())
    return CONFIG_MAIN_PATH


def config_runtime_path() -> Path:
    """``config.runtime.ini`` liegt immer neben der Basisdatei."""
    return config_main_path().with_name("config.runtime.ini")


def load_base_config() -> configparser.ConfigParser:
    """Lädt ausschließlich die statische Grundkonfiguration."""
    cfg = configparser.ConfigParser()
    cfg.read(config_main_path(), encoding="utf-8-sig")
    return cfg


def load_runtime_config() -> configparser.ConfigParser:
    """Lädt nur die lokalen Overrides."""
    cfg = configparser.ConfigParser()
    path = config_runtime_path()
    if path.exists():
        cfg.read(path, encoding="utf-8-sig")
    return cfg


def load_merged_config() -> configparser.ConfigParser:
    """Kombiniert statische und lokale Konfiguration."""
    base = load_base_config()
    runtime = load_runtime_config()
    for section in runtime.sections():
        if not base.has_section(section):
            base.add_section(section)
        for key, value in runtime.items(section):
            base.set(section, key, value)
    return base


def get_int_option(
    cfg: configparser.ConfigParser, section: str, option: str, default: int
) -> int:
    """Liest einen Integer und fällt bei ungültigem Wert auf ``default`` zurück."""
    if not cfg.has_option(section, option):
        return default
    try:
        return cfg.getint(section, option)
    except ValueError:
        raw_value = cfg.get(section, option, fallback="").strip()
        logger.warning(
            "Ignoriere ungueltigen Wert fuer %s.%s: %s",
            section,
            option,
            raw_value,
        )
        return default


def get_flag(cfg: configparser.ConfigParser, section: str, option: str) -> bool:
    """0/1-Schalter im Stil von ``log_expressions = 1``."""
    return get_int_option(cfg, section, option, 0) == 1


def get_str_option(
    cfg: configparser.ConfigParser, section: str, option: str, default: str = ""
) -> str:
    value: Optional[str] = cfg.get(section, option, fallback=default)
    return (value or default).strip()
