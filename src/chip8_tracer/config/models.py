from dataclasses import dataclass, field
from typing import List, Optional

@dataclass
class MemoryRegion:
    start: int
    end: int
    type: str  # "RAM", "ROM"
    label: str = ""

@dataclass
class CpuInitialState:
    pc: int = 0x200
    registers: dict = field(default_factory=dict)  # v, index, delay_timer, sound_timer

@dataclass
class QuirkConfig:
    increment_index_on_block_transfer: bool = False
    clip_sprites: bool = True

@dataclass
class SystemConfig:
    architecture: str = "CHIP8"
    memory_map: List[MemoryRegion] = field(default_factory=list)
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
    quirks: QuirkConfig = field(default_factory=QuirkConfig)
    random_seed: Optional[int] = None
