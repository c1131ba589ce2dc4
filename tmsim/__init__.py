from .config_loader import (
    ConfigError,
    ConfigParseError,
    ConfigReadError,
    ProgramSpec,
    Rule,
    load_program,
    parse_program,
    program_path,
)
from .machine import (
    MachineError,
    Move,
    NoMatchingRule,
    RunResult,
    RunStatus,
    Snapshot,
    StepLimitExceeded,
    TapeBoundsExceeded,
    TuringMachine,
    UnknownMovement,
)

__all__ = [
    "ConfigError",
    "ConfigParseError",
    "ConfigReadError",
    "ProgramSpec",
    "Rule",
    "load_program",
    "parse_program",
    "program_path",
    "MachineError",
    "Move",
    "NoMatchingRule",
    "RunResult",
    "RunStatus",
    "Snapshot",
    "StepLimitExceeded",
    "TapeBoundsExceeded",
    "TuringMachine",
    "UnknownMovement",
]
