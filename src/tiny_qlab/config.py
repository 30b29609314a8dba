"""
Simulator settings.

All numeric policy (qubit cap, tolerances, comparison precision) lives in one
frozen dataclass so that simulation and grading agree on it. Defaults can be
overridden from ``TINY_QLAB_*`` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional

HARD_QUBIT_CAP = 5

_ENV_PREFIX = "TINY_QLAB_"


@dataclass(frozen=True)
class SimulatorSettings:
    min_qubits: int = 1
    max_qubits: int = HARD_QUBIT_CAP  # 2^5 = 32 amplitudes
    max_gates: int = 256
    max_payload_chars: int = 10000
    norm_tolerance: float = 1e-6
    probability_epsilon: float = 1e-9
    compare_decimals: int = 4
    histogram_shots: int = 100

    def validate(self) -> None:
        if not 1 <= self.min_qubits <= self.max_qubits <= HARD_QUBIT_CAP:
            raise ValueError(
                f"qubit range [{self.min_qubits}, {self.max_qubits}] must lie "
                f"within [1, {HARD_QUBIT_CAP}]"
            )
        if self.max_gates < 0:
            raise ValueError(f"max_gates must be >= 0, got {self.max_gates}")
        if self.max_payload_chars <= 0:
            raise ValueError(
                f"max_payload_chars must be positive, got {self.max_payload_chars}"
            )
        if not 0 < self.norm_tolerance < 1:
            raise ValueError(f"norm_tolerance must be in (0, 1), got {self.norm_tolerance}")
        if not 0 <= self.probability_epsilon < 1:
            raise ValueError(
                f"probability_epsilon must be in [0, 1), got {self.probability_epsilon}"
            )
        if not 0 <= self.compare_decimals <= 12:
            raise ValueError(
                f"compare_decimals must be in [0, 12], got {self.compare_decimals}"
            )
        if self.histogram_shots <= 0:
            raise ValueError(
                f"histogram_shots must be positive, got {self.histogram_shots}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SimulatorSettings":
        """
        Build settings from defaults overridden by ``TINY_QLAB_<FIELD>`` variables.

        ``min_qubits`` and ``max_qubits`` are not read from the environment;
        the qubit cap is fixed.
        """
        env = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            if f.name in ("min_qubits", "max_qubits"):
                continue
            raw = env.get(_ENV_PREFIX + f.name.upper())
            if raw is None or not str(raw).strip():
                continue
            caster = float if isinstance(getattr(DEFAULT_SETTINGS, f.name), float) else int
            try:
                overrides[f.name] = caster(str(raw).strip())
            except ValueError as e:
                raise ValueError(
                    f"{_ENV_PREFIX}{f.name.upper()}={raw!r} is not a valid {caster.__name__}"
                ) from e
        settings = replace(DEFAULT_SETTINGS, **overrides)
        settings.validate()
        return settings


DEFAULT_SETTINGS = SimulatorSettings()


def resolve(settings: Optional[SimulatorSettings]) -> SimulatorSettings:
    """Return ``settings`` or the package defaults."""
    return DEFAULT_SETTINGS if settings is None else settings
