"""Simulation configuration: age cap and cadence modes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union

DEFAULT_MAX_AGE = 12
DEFAULT_MAX_PENDING_NOTIFICATIONS = 16


class CadenceMode(Enum):
    """How the driver paces successive generations."""

    IMMEDIATE = "immediate"
    DELAY = "delay"
    MANUAL = "manual"


@dataclass(frozen=True)
class Cadence:
    """Pacing policy for the simulation driver.

    Recognized textual forms are ``immediate``, ``delay:D`` (D milliseconds
    before each step) and ``manual`` (wait for an explicit advance signal).
    """

    mode: CadenceMode = CadenceMode.IMMEDIATE
    delay_ms: int = 0

    def __post_init__(self) -> None:
        if self.delay_ms < 0:
            raise ValueError(f"Cadence delay must be non-negative, got {self.delay_ms}")
        if self.mode is not CadenceMode.DELAY and self.delay_ms:
            raise ValueError(f"Cadence mode '{self.mode.value}' takes no delay")

    @classmethod
    def immediate(cls) -> "Cadence":
        return cls(CadenceMode.IMMEDIATE)

    @classmethod
    def delay(cls, milliseconds: int) -> "Cadence":
        return cls(CadenceMode.DELAY, milliseconds)

    @classmethod
    def manual(cls) -> "Cadence":
        return cls(CadenceMode.MANUAL)

    @classmethod
    def parse(cls, text: str) -> "Cadence":
        """Parse a cadence string.

        Args:
            text: One of ``immediate``, ``delay:D`` or ``manual``

        Returns:
            The corresponding Cadence

        Raises:
            ValueError: If the string is not a recognized cadence
        """
        value = text.strip()
        if value == CadenceMode.IMMEDIATE.value:
            return cls.immediate()
        if value == CadenceMode.MANUAL.value:
            return cls.manual()
        if value.startswith(CadenceMode.DELAY.value + ":"):
            _, delay_str = value.split(":", 1)
            try:
                milliseconds = int(delay_str)
            except ValueError:
                raise ValueError(f"Invalid delay in cadence '{text}'")
            return cls.delay(milliseconds)

        raise ValueError(f"Unknown cadence '{text}'. Available: immediate, delay:D, manual")

    @property
    def is_manual(self) -> bool:
        return self.mode is CadenceMode.MANUAL

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000.0

    def __str__(self) -> str:
        if self.mode is CadenceMode.DELAY:
            return f"delay:{self.delay_ms}"
        return self.mode.value


# Speed menu of the interactive program: 1 is as fast as possible while still
# visible, 4 waits for the operator before each generation.
SPEED_PRESETS: Dict[int, Cadence] = {
    1: Cadence.delay(10),
    2: Cadence.delay(100),
    3: Cadence.delay(1000),
    4: Cadence.manual(),
}


@dataclass
class LifeConfig:
    """Configuration for a simulation run."""

    max_age: int = DEFAULT_MAX_AGE
    cadence: Cadence = field(default_factory=Cadence.immediate)
    max_generations: Optional[int] = None
    block_on_observer: bool = False
    max_pending_notifications: int = DEFAULT_MAX_PENDING_NOTIFICATIONS

    def __post_init__(self) -> None:
        if isinstance(self.cadence, str):
            self.cadence = Cadence.parse(self.cadence)
        if self.max_age < 1:
            raise ValueError(f"max_age must be at least 1, got {self.max_age}")
        if self.max_generations is not None and self.max_generations < 0:
            raise ValueError(f"max_generations must be non-negative, got {self.max_generations}")
        if self.max_pending_notifications < 1:
            raise ValueError(f"max_pending_notifications must be at least 1, got {self.max_pending_notifications}")


def resolve_cadence(value: Union[Cadence, str, int]) -> Cadence:
    """Turn a Cadence, cadence string or speed preset number into a Cadence."""
    if isinstance(value, Cadence):
        return value
    if isinstance(value, int):
        if value not in SPEED_PRESETS:
            raise ValueError(f"Speed must be between 1 and {len(SPEED_PRESETS)}, got {value}")
        return SPEED_PRESETS[value]
    return Cadence.parse(value)
