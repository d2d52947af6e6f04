# chip8_tracer/loader/loader.py
"""
プログラムローダーモジュール。
ヘッダを持たない生のCHIP-8プログラムイメージ（.ch8）のロードをサポートします。
"""
from chip8_tracer.core.errors import ProgramTooLargeError
from chip8_tracer.transport.bus import Bus

# @intent:constant 既定のロード先アドレス。
PROGRAM_START = 0x200

# @intent:constant 4KBのアドレス空間の終端（この直前まで書き込める）。
ADDRESS_LIMIT = 0x1000

class BinaryLoader:
    """
    生のバイナリイメージを指定アドレスからバスにロードするローダー。
    ロード先の範囲を越える場合は、1バイトも書き込まずに ProgramTooLargeError を送出します。
    """
    def load_bytes(self, data: bytes, bus: Bus, offset: int = PROGRAM_START) -> int:
        capacity = ADDRESS_LIMIT - offset
        if len(data) > capacity:
            raise ProgramTooLargeError(len(data), capacity)
        for i, byte in enumerate(data):
            bus.load(offset + i, byte)
        return len(data)

    def load_binary(self, file_path: str, bus: Bus, offset: int = PROGRAM_START) -> int:
        with open(file_path, 'rb') as f:
            data = f.read()
        return self.load_bytes(data, bus, offset)
