import warnings
from typing import Any, Dict

import yaml

from chip8_tracer.common.errors import ConfigError
from .models import SystemConfig, CpuInitialState

SUPPORTED_ARCHITECTURES = ("CHIP8",)
_TOP_LEVEL_KEYS = {"architecture", "random_seed", "initial_state"}
_STATE_KEYS = {"pc", "i", "delay_timer", "sound_timer", "registers"}

class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r', encoding="utf-8") as f:
            return self.load_from_string(f.read())

    def load_from_string(self, text: str) -> SystemConfig:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be a mapping.")
        return self._parse_config(data)

    def _parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        self._warn_unknown_keys(data, _TOP_LEVEL_KEYS, "configuration")

        arch = str(data.get("architecture", "CHIP8")).upper().replace("-", "")
        if arch not in SUPPORTED_ARCHITECTURES:
            raise ConfigError(f"Unsupported architecture: {data.get('architecture')}")

        seed = data.get("random_seed")
        if seed is not None:
            seed = self._parse_int(seed)

        # Parse Initial State
        initial_state_data = data.get("initial_state") or {}
        if not isinstance(initial_state_data, dict):
            raise ConfigError("initial_state must be a mapping.")
        self._warn_unknown_keys(initial_state_data, _STATE_KEYS, "initial_state")

        defaults = CpuInitialState()
        registers = initial_state_data.get("registers") or {}
        if not isinstance(registers, dict):
            raise ConfigError("initial_state.registers must be a mapping.")

        initial_state = CpuInitialState(
            pc=self._parse_int(initial_state_data.get("pc", defaults.pc)),
            i=self._parse_int(initial_state_data.get("i", defaults.i)),
            delay_timer=self._parse_byte(initial_state_data.get("delay_timer", 0), "delay_timer"),
            sound_timer=self._parse_byte(initial_state_data.get("sound_timer", 0), "sound_timer"),
            registers={str(name).lower(): self._parse_byte(value, str(name)) for name, value in registers.items()}
        )

        return SystemConfig(
            architecture=arch,
            random_seed=seed,
            initial_state=initial_state
        )

    def _warn_unknown_keys(self, data: Dict[str, Any], known: set, section: str) -> None:
        for key in data:
            if key not in known:
                warnings.warn(f"Unknown key '{key}' in {section} is ignored.")

    def _parse_byte(self, value: Any, name: str) -> int:
        parsed = self._parse_int(value)
        if not 0 <= parsed <= 0xFF:
            raise ConfigError(f"{name} must be an 8-bit value: {value}")
        return parsed

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ConfigError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                if value.lower().startswith("0x"):
                    return int(value, 16)
                return int(value)
            except ValueError as e:
                raise ConfigError(f"Invalid integer format: {value}") from e
        raise ConfigError(f"Invalid integer format: {value}")
