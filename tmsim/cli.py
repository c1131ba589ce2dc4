from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from .config_loader import ConfigError, load_program, program_path
from .machine import MachineError, Snapshot, TuringMachine


def init_logging(verbose: bool = False) -> None:
    """Configura el logger raíz sobre stderr; stdout queda para la traza."""

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    level = logging.DEBUG if verbose else logging.WARNING
    root.setLevel(level)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(levelname)-7s %(name)s: %(message)s"))
    root.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tmsim",
        description="Simulador de Máquinas de Turing basado en programas '<nombre>.tm.json'",
    )
    parser.add_argument(
        "name",
        help="Nombre base del programa, sin la extensión '.tm.json'",
    )
    parser.add_argument(
        "--dir",
        dest="directory",
        type=Path,
        default=Path("."),
        help="Directorio donde buscar el programa (por defecto, el actual)",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Número máximo de pasos permitidos; sin límite si se omite",
    )
    parser.add_argument(
        "--no-trace",
        dest="trace",
        action="store_false",
        help="Desactiva la impresión de cada configuración intermedia",
    )
    parser.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Devuelve la salida en formato JSON para facilitar el post-procesamiento",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Muestra el registro de depuración en stderr",
    )
    return parser


def _print_snapshot(snapshot: Snapshot) -> None:
    print(snapshot.format())


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    init_logging(args.verbose)

    path = program_path(args.name, args.directory)
    try:
        spec = load_program(path)
    except ConfigError as exc:
        print(exc)
        return 1

    machine = TuringMachine(spec)

    if args.json_output:
        try:
            result = machine.run(max_steps=args.max_steps, capture=args.trace)
        except MachineError as exc:
            payload = {
                "program": str(path),
                "halted": False,
                "error": str(exc),
                "steps": machine.steps,
                "final": machine.snapshot().as_dict(),
            }
            print(json.dumps(payload, indent=2, ensure_ascii=False))
            return 1
        payload = {
            "program": str(path),
            "halted": True,
            "steps": result.steps,
            "final": result.final.as_dict(),
            "snapshots": [snapshot.as_dict() for snapshot in result.snapshots],
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0

    print(f"\nMÁQUINA DE TURING\nPrograma: {path}\n")
    try:
        result = machine.run(
            max_steps=args.max_steps,
            on_snapshot=_print_snapshot if args.trace else None,
            capture=False,
        )
    except MachineError as exc:
        print(exc)
        return 1

    print("\nLa máquina de Turing se detuvo\nConfiguración final de la cinta:")
    print(result.final.format())
    print(f"pasos={result.steps}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
