# src/chip8_tracer/arch/chip8/disassembler.py
"""
CHIP-8 Disassembler

メモリ上のバイナリデータを解析し、CHIP-8のニーモニックに変換します。
Instruction Layerのデコードロジックを再利用し、読み出しはpeek（ログなし）で行うため
バスアクセスログを汚しません。
"""
from typing import List, Tuple
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.instructions import decode_opcode

# @intent:constant アドレス空間の上限。
ADDRESS_LIMIT = 0x1000

# @intent:responsibility 指定されたメモリ範囲を逆アセンブルし、表示用データを生成します。
def disassemble(bus: Bus, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
    """
    指定された範囲（バイト数）のメモリを2バイト単位で逆アセンブルします。

    Returns:
        List of (address, hex_word, mnemonic) tuples.
    """
    result = []
    current_addr = start_addr
    end_addr = min(start_addr + length, ADDRESS_LIMIT)

    while current_addr + 1 < end_addr:
        word = (bus.peek(current_addr) << 8) | bus.peek(current_addr + 1)
        operation = decode_opcode(word)

        mnemonic_str = operation.mnemonic
        if operation.operands:
            mnemonic_str += " " + ", ".join(operation.operands)

        result.append((current_addr, operation.opcode_hex, mnemonic_str))
        current_addr += operation.length

    return result
