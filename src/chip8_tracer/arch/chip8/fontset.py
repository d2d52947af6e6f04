# src/chip8_tracer/arch/chip8/fontset.py
"""
16進数字フォント（0-F）のグリフ定義。
各グリフは幅8ドット（上位4ビットのみ使用）、高さ5行です。
"""

# @intent:constant フォントテーブルの配置先アドレス。
FONT_BASE = 0x050

# @intent:constant 1グリフあたりのバイト数。
GLYPH_SIZE = 5

FONT_SET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])

FONT_END = FONT_BASE + len(FONT_SET) - 1  # 0x09F


# @intent:utility_function 16進数字のグリフ先頭アドレスを返します。下位4ビットのみ使用します。
def glyph_address(digit: int) -> int:
    return FONT_BASE + (digit & 0x0F) * GLYPH_SIZE
