from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Tuple

import yaml

HEAD_CENTER = -1
PROGRAM_SUFFIX = ".tm.json"
YAML_SUFFIXES = (".tm.yaml", ".tm.yml")


class ConfigError(Exception):
    """Error base al cargar un programa de la MT."""


class ConfigReadError(ConfigError):
    """El archivo del programa no existe o no se puede leer."""


class ConfigParseError(ConfigError):
    """El contenido del programa está mal formado."""


@dataclass(frozen=True)
class Rule:
    """Representa una transición de la MT."""

    current_state: str
    tape_symbol: str
    next_state: str
    write_symbol: str
    move: str


@dataclass(frozen=True)
class ProgramSpec:
    """Estructura de datos inmutable con el programa completo."""

    tape: Tuple[str, ...]
    initial_state: str
    rules: Tuple[Rule, ...]
    halt_state: str
    head_position: int = HEAD_CENTER


def _normalize_config(data: Mapping) -> Mapping:
    """Acepta programas con o sin el nodo 'machine'."""

    if "machine" in data and isinstance(data["machine"], dict):
        return data["machine"]
    return data


def _require_string(config: Mapping, key: str, where: str = "") -> str:
    value = config.get(key)
    # YAML sin comillas: 'tape: 101' llega como entero.
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        raise ConfigParseError(f"El campo '{key}'{where} es obligatorio y debe ser una cadena.")
    return value


def program_path(name: str, directory: str | Path = ".") -> Path:
    """Resuelve '<name>.tm.json' (o su variante YAML) dentro de ``directory``."""

    base = Path(directory)
    candidate = base / f"{name}{PROGRAM_SUFFIX}"
    if candidate.exists():
        return candidate
    for suffix in YAML_SUFFIXES:
        alternative = base / f"{name}{suffix}"
        if alternative.exists():
            return alternative
    return candidate


def parse_program(data: Any) -> ProgramSpec:
    """Valida la forma del registro y construye el ``ProgramSpec``.

    Solo se comprueba la estructura: los movimientos, estados y símbolos
    no se validan aquí, el motor los interpreta al ejecutar.
    """

    if not isinstance(data, Mapping):
        raise ConfigParseError("El programa debe describir un objeto mapeo.")
    config = _normalize_config(data)

    tape = _require_string(config, "tape")
    initial_state = _require_string(config, "initialState")
    halt_state = _require_string(config, "haltState")

    head_position = config.get("headPosition")
    if head_position is None:
        head_position = HEAD_CENTER
    elif isinstance(head_position, bool) or not isinstance(head_position, int):
        raise ConfigParseError(f"'headPosition' debe ser un entero, no {head_position!r}.")

    raw_rules = config.get("rules")
    if raw_rules is None:
        raw_rules = []
    if not isinstance(raw_rules, list):
        raise ConfigParseError("El bloque 'rules' debe ser una lista de transiciones.")

    rules = []
    for index, raw_rule in enumerate(raw_rules):
        if not isinstance(raw_rule, Mapping):
            raise ConfigParseError(f"La regla #{index} debe ser un objeto.")
        where = f" de la regla #{index}"
        rules.append(
            Rule(
                current_state=_require_string(raw_rule, "currentState", where),
                tape_symbol=_require_string(raw_rule, "tapeSymbol", where),
                next_state=_require_string(raw_rule, "nextState", where),
                write_symbol=_require_string(raw_rule, "writeSymbol", where),
                move=_require_string(raw_rule, "move", where),
            )
        )

    return ProgramSpec(
        tape=tuple(tape),
        initial_state=initial_state,
        rules=tuple(rules),
        halt_state=halt_state,
        head_position=head_position,
    )


def load_program(path: str | Path) -> ProgramSpec:
    """Carga el archivo JSON (o YAML) que describe la MT."""

    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            text = handle.read()
    except OSError as exc:
        raise ConfigReadError(
            f"{exc}\nLos archivos de programa deben terminar en '{PROGRAM_SUFFIX}', "
            f"pero no hace falta incluir '{PROGRAM_SUFFIX}' en el argumento."
        ) from exc
    except UnicodeDecodeError as exc:
        raise ConfigParseError(f"{path}: el archivo no está codificado en UTF-8 ({exc})") from exc

    try:
        if path.suffix in {".yaml", ".yml"}:
            raw_data = yaml.safe_load(text)
        else:
            raw_data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigParseError(str(exc)) from exc

    return parse_program(raw_data)
