"""ProgramTranslator — turns generated program text into a command list.

The program runs inside a SandboxInterpreter whose only capability is
``emit(type, payload=None)``; ``cmd`` is the same callable under the name
the block generator uses. Commands are appended the moment they are
emitted, so a program that faults midway still yields the prefix it
emitted before the fault. The fault is logged and never re-raised.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import xxhash

from codecraft.core.enums import CommandType
from codecraft.core.models import Command
from codecraft.engine.interpreter import (
    ForbiddenConstruct, ProgramBudgetExceeded, ProgramFault, SandboxInterpreter,
)

if TYPE_CHECKING:
    from codecraft.config import GameConfig

logger = logging.getLogger(__name__)

EMIT_NAMES = ("emit", "cmd")

# Payloads travel to the API and into replay files as JSON.
_PAYLOAD_TYPES = (str, int, float, bool, type(None))


def program_digest(program: str) -> str:
    """Short stable fingerprint of a program text."""
    return xxhash.xxh64(program.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class Translation:
    """Commands emitted by one program run, plus the fault that stopped it."""

    digest: str
    commands: tuple[Command, ...]
    fault: str | None = None

    @property
    def empty(self) -> bool:
        return not self.commands


class ProgramTranslator:
    """Runs programs in the sandbox and collects their emitted commands.

    Translations are cached by program digest. Results cut short by the
    wall-clock limit are not cached because they depend on machine load.
    """

    __slots__ = ("_config", "_cache")

    def __init__(self, config: GameConfig) -> None:
        self._config = config
        self._cache: OrderedDict[str, Translation] = OrderedDict()

    def translate(self, program: str) -> tuple[Command, ...]:
        return self.translate_detailed(program).commands

    def translate_detailed(self, program: str) -> Translation:
        digest = program_digest(program)
        cached = self._cache.get(digest)
        if cached is not None:
            self._cache.move_to_end(digest)
            return cached

        commands: list[Command] = []
        max_commands = self._config.max_commands

        def emit(type_: Any, payload: Any = None) -> None:
            if len(commands) >= max_commands:
                raise ProgramBudgetExceeded(f"more than {max_commands} commands emitted")
            if not isinstance(payload, _PAYLOAD_TYPES):
                raise ForbiddenConstruct(
                    f"command payload must be a number, string, boolean or None, not {type(payload).__name__}"
                )
            commands.append(Command(CommandType(type_), payload))

        interpreter = SandboxInterpreter(
            {name: emit for name in EMIT_NAMES},
            max_steps=self._config.max_steps,
            timeout_seconds=self._config.timeout_seconds,
        )
        fault: str | None = None
        cacheable = True
        try:
            interpreter.run(program)
        except ProgramFault as exc:
            fault = str(exc)
            cacheable = not isinstance(exc, ProgramBudgetExceeded)
            logger.warning(
                "Program %s faulted after %d command(s): %s", digest, len(commands), fault,
            )

        result = Translation(digest=digest, commands=tuple(commands), fault=fault)
        logger.debug("Program %s -> %d command(s) in %d steps", digest, len(commands), interpreter.steps)
        if cacheable:
            self._remember(digest, result)
        return result

    def _remember(self, digest: str, result: Translation) -> None:
        self._cache[digest] = result
        while len(self._cache) > self._config.translation_cache_size:
            self._cache.popitem(last=False)
