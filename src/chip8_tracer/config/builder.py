import random
import warnings
from typing import List, Tuple

from chip8_tracer.transport.bus import Bus, RAM, ROM
from chip8_tracer.arch.chip8.cpu import Chip8Cpu, MEMORY_SIZE
from chip8_tracer.arch.chip8.peripherals import Chip8Devices, Chip8Quirks
from chip8_tracer.arch.chip8.fontset import FONT_BASE, FONT_END
from .models import SystemConfig, CpuInitialState, MemoryRegion

# @intent:constant メモリマップ未指定時の既定構成。フォント領域のみROMとします。
DEFAULT_MEMORY_MAP = [
    MemoryRegion(start=0x000, end=FONT_BASE - 1, type="RAM", label="System"),
    MemoryRegion(start=FONT_BASE, end=FONT_END, type="ROM", label="Font"),
    MemoryRegion(start=FONT_END + 1, end=MEMORY_SIZE - 1, type="RAM", label="Program"),
]

# @intent:responsibility システム構成（Config）に基づいて、Bus、Device、CPUを生成・接続し、初期状態を適用します。
class SystemBuilder:
    def build_system(self, config: SystemConfig) -> Tuple[Chip8Cpu, Bus]:
        if config.architecture.upper() not in ("CHIP8", "CHIP-8"):
            raise ValueError(f"Unsupported architecture: {config.architecture}")

        memory_map = config.memory_map or DEFAULT_MEMORY_MAP
        self._check_coverage(memory_map)

        bus = Bus()
        for region in memory_map:
            size = region.end - region.start + 1
            if region.type == "RAM":
                device = RAM(size)
            elif region.type == "ROM":
                device = ROM(size)
            else:
                warnings.warn(
                    f"Unknown device type '{region.type}' for range {region.start:03X}-{region.end:03X}, defaulting to RAM"
                )
                device = RAM(size)
            bus.register_device(region.start, region.end, device)

        devices = Chip8Devices(
            quirks=Chip8Quirks(
                increment_index_on_block_transfer=config.quirks.increment_index_on_block_transfer,
                clip_sprites=config.quirks.clip_sprites,
            ),
            rng=random.Random(config.random_seed),
        )
        cpu = Chip8Cpu(bus, devices)

        # 初期状態の適用
        self.apply_initial_state(cpu, config.initial_state)

        return cpu, bus

    # @intent:responsibility メモリマップが 0x000-0xFFF を隙間・重複なく覆っていることを検証します。
    def _check_coverage(self, memory_map: List[MemoryRegion]) -> None:
        expected = 0x000
        for region in sorted(memory_map, key=lambda r: r.start):
            if region.start != expected or region.end < region.start:
                raise ValueError(f"Memory map must cover 0x000-0xFFF contiguously; problem at {expected:#05x}")
            expected = region.end + 1
        if expected != MEMORY_SIZE:
            raise ValueError(f"Memory map must cover 0x000-0xFFF contiguously; ends at {expected - 1:#05x}")

    # @intent:responsibility Configで定義された初期状態をCPUに適用します。
    def apply_initial_state(self, cpu: Chip8Cpu, config_state: CpuInitialState) -> None:
        """
        CPUをリセットし、Configから指定された初期値を適用します。
        """
        cpu.reset()
        state = cpu.get_state()
        state.pc = config_state.pc & 0xFFF
        for reg_name, value in config_state.registers.items():
            if reg_name == "v":
                for i, reg_value in enumerate(value[:len(state.v)]):
                    state.v[i] = reg_value & 0xFF
            elif reg_name in ("index", "delay_timer", "sound_timer"):
                setattr(state, reg_name, value)
            else:
                raise ValueError(f"Unknown register in initial_state: {reg_name}")
