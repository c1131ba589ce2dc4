from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .config_loader import HEAD_CENTER, ProgramSpec, Rule

logger = logging.getLogger(__name__)


class Move(str, Enum):
    LEFT = "L"
    RIGHT = "R"


class RunStatus(Enum):
    RUNNING = "running"
    HALTED = "halted"
    FAILED = "failed"


class MachineError(Exception):
    """Error base durante la ejecución de la MT."""


class UnknownMovement(MachineError):
    def __init__(self, move: str, state: str, head: int) -> None:
        super().__init__(f"Movimiento desconocido {move!r} (estado={state}, cabeza={head})")
        self.move = move
        self.state = state
        self.head = head


class TapeBoundsExceeded(MachineError):
    def __init__(self, head: int, length: int) -> None:
        super().__init__(f"La cabeza salió de la cinta: posición {head} fuera de [0, {length})")
        self.head = head
        self.length = length


class NoMatchingRule(MachineError):
    def __init__(self, state: str, symbol: str, head: int) -> None:
        super().__init__(
            f"No existe transición definida para estado={state!r}, símbolo={symbol!r} "
            f"(cabeza={head})"
        )
        self.state = state
        self.symbol = symbol
        self.head = head


class StepLimitExceeded(MachineError):
    def __init__(self, steps: int) -> None:
        super().__init__(f"Se alcanzó el límite máximo de pasos ({steps}) sin detenerse")
        self.steps = steps


@dataclass(frozen=True)
class Snapshot:
    """Configuración observable (cinta, cabeza, estado) en un paso dado."""

    step: int
    state: str
    head: int
    tape: Tuple[str, ...]

    def format(self) -> str:
        width = max((len(symbol) for symbol in self.tape), default=1)
        cells = "|" + "|".join(symbol.ljust(width) for symbol in self.tape) + "|"
        note = ""
        if self.head < 0:
            column = 0
            note = f" (cabeza={self.head})"
        elif self.head >= len(self.tape):
            column = len(cells) - 1
            note = f" (cabeza={self.head})"
        else:
            column = 1 + self.head * (width + 1)
        return f"{cells}\n{' ' * column}^{self.state}{note}"

    @property
    def tape_string(self) -> str:
        return "".join(self.tape)

    def as_dict(self) -> Dict[str, object]:
        return {
            "step": self.step,
            "state": self.state,
            "head": self.head,
            "tape": self.tape_string,
        }


@dataclass
class RunResult:
    """Resultado final de una ejecución que se detuvo en el estado de parada."""

    steps: int
    final: Snapshot
    snapshots: List[Snapshot] = field(default_factory=list)

    @property
    def tape_string(self) -> str:
        return self.final.tape_string


class TuringMachine:
    """Máquina de Turing determinista de una cinta finita.

    La máquina es dueña de una copia mutable de la cinta; solo ``step``
    modifica la cinta, la cabeza y el estado.
    """

    def __init__(self, spec: ProgramSpec) -> None:
        self.tape: List[str] = list(spec.tape)
        self.state = spec.initial_state
        self.rules: Tuple[Rule, ...] = tuple(spec.rules)
        self.halt_state = spec.halt_state
        if spec.head_position == HEAD_CENTER:
            self.head = len(self.tape) // 2
        else:
            self.head = spec.head_position
        self.steps = 0
        self.status = RunStatus.RUNNING
        logger.info(
            "Máquina creada: %d celdas, cabeza=%d, estado=%s, parada=%s, %d reglas",
            len(self.tape),
            self.head,
            self.state,
            self.halt_state,
            len(self.rules),
        )

    @property
    def at_halt_state(self) -> bool:
        return self.state == self.halt_state

    def snapshot(self) -> Snapshot:
        return Snapshot(step=self.steps, state=self.state, head=self.head, tape=tuple(self.tape))

    def find_rule(self, state: str, symbol: str) -> Optional[Rule]:
        """Devuelve la primera regla (en orden de lista) para el par dado."""

        for rule in self.rules:
            if rule.current_state == state and rule.tape_symbol == symbol:
                return rule
        return None

    def step(self) -> Rule:
        """Aplica una transición y devuelve la regla usada.

        El símbolo se escribe y el estado cambia antes de interpretar el
        movimiento, de modo que un ``UnknownMovement`` deja esa escritura
        aplicada. Si el nuevo estado es el de parada, la máquina queda
        detenida y no admite más pasos.
        """

        if self.status is not RunStatus.RUNNING:
            raise MachineError(f"La máquina ya terminó ({self.status.value})")

        try:
            if not 0 <= self.head < len(self.tape):
                raise TapeBoundsExceeded(self.head, len(self.tape))
            symbol = self.tape[self.head]
            rule = self.find_rule(self.state, symbol)
            if rule is None:
                raise NoMatchingRule(self.state, symbol, self.head)

            self.state = rule.next_state
            self.tape[self.head] = rule.write_symbol
            if rule.move == Move.LEFT.value:
                self.head -= 1
            elif rule.move == Move.RIGHT.value:
                self.head += 1
            else:
                raise UnknownMovement(rule.move, self.state, self.head)
        except MachineError as exc:
            self.status = RunStatus.FAILED
            logger.warning("Paso %d fallido: %s", self.steps + 1, exc)
            raise

        self.steps += 1
        logger.debug(
            "Paso %d: (%s, %s) -> (%s, %s, %s)",
            self.steps,
            rule.current_state,
            rule.tape_symbol,
            rule.next_state,
            rule.write_symbol,
            rule.move,
        )
        if self.at_halt_state:
            self.status = RunStatus.HALTED
            logger.info("La máquina se detuvo en %s tras %d pasos", self.state, self.steps)
        return rule

    def run(
        self,
        *,
        max_steps: Optional[int] = None,
        on_snapshot: Optional[Callable[[Snapshot], None]] = None,
        capture: bool = True,
    ) -> RunResult:
        """Ejecuta la máquina hasta alcanzar el estado de parada.

        Antes de cada paso se emite la configuración actual a ``on_snapshot``;
        la configuración final solo se entrega en ``RunResult.final`` (y al
        final de ``snapshots`` si ``capture`` está activo). Sin ``max_steps``
        el ciclo no tiene límite, como corresponde a una MT que nunca para.
        """

        if self.status is not RunStatus.RUNNING:
            raise MachineError(f"La máquina ya terminó ({self.status.value})")

        snapshots: List[Snapshot] = []

        def emit() -> None:
            current = self.snapshot()
            if capture:
                snapshots.append(current)
            if on_snapshot is not None:
                on_snapshot(current)

        while True:
            if max_steps is not None and self.steps >= max_steps:
                self.status = RunStatus.FAILED
                raise StepLimitExceeded(self.steps)
            emit()
            self.step()
            if self.status is RunStatus.HALTED:
                break

        final = self.snapshot()
        if capture:
            snapshots.append(final)
        return RunResult(steps=self.steps, final=final, snapshots=snapshots)
