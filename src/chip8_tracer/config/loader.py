import yaml
from typing import Dict, Any
from .models import SystemConfig, MemoryRegion, CpuInitialState, QuirkConfig

class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return self._parse_config(data or {})

    def load_from_string(self, text: str) -> SystemConfig:
        return self._parse_config(yaml.safe_load(text) or {})

    def _parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        arch = str(data.get("architecture", "CHIP8"))

        # Parse Memory Map
        memory_map = []
        for region_data in data.get("memory_map") or []:
            memory_map.append(MemoryRegion(
                start=self._parse_int(region_data.get("start")),
                end=self._parse_int(region_data.get("end")),
                type=region_data.get("type", "RAM"),
                label=region_data.get("label", "")
            ))

        # Parse Initial State
        initial_state_data = data.get("initial_state") or {}
        registers = {}
        for name, value in (initial_state_data.get("registers") or {}).items():
            if isinstance(value, list):
                registers[name] = [self._parse_int(v) for v in value]
            else:
                registers[name] = self._parse_int(value)
        initial_state = CpuInitialState(
            pc=self._parse_int(initial_state_data.get("pc", 0x200)),
            registers=registers
        )

        # Parse Quirks
        quirk_data = data.get("quirks") or {}
        quirks = QuirkConfig(
            increment_index_on_block_transfer=bool(quirk_data.get("increment_index_on_block_transfer", False)),
            clip_sprites=bool(quirk_data.get("clip_sprites", True))
        )

        seed = data.get("random_seed")

        return SystemConfig(
            architecture=arch,
            memory_map=memory_map,
            initial_state=initial_state,
            quirks=quirks,
            random_seed=self._parse_int(seed) if seed is not None else None
        )

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            if value.lower().startswith("0x"):
                return int(value, 16)
            return int(value)
        raise ValueError(f"Invalid integer format: {value}")
