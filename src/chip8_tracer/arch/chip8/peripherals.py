# src/chip8_tracer/arch/chip8/peripherals.py
"""
CHIP-8のペリフェラル（フレームバッファ、キーパッド）と、
命令実行時にそれらを束ねて渡すためのコンテナを定義します。

ウィンドウ描画やキーボードイベントの変換は外部のシェルの責務であり、
ここではシェルが読み書きする状態のみを保持します。
"""
import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from chip8_tracer.core.errors import InvalidKeyError

# @intent:constant 画面の幅と高さ（ピクセル）。
SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32

# @intent:constant キーパッドのキー数 (0x0-0xF)。
NUM_KEYS = 16


# @intent:responsibility 64x32のモノクロフレームバッファを保持し、XORによるピクセル反転を提供します。
class Framebuffer:
    """
    1ピクセル1バイト (0 or 1) で画面状態を保持するフレームバッファ。
    座標系は左上が (0, 0) です。
    """
    def __init__(self, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT):
        self._width = width
        self._height = height
        self._pixels = bytearray(width * height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def _offset(self, x: int, y: int) -> int:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(f"Pixel ({x}, {y}) out of bounds for {self._width}x{self._height} display.")
        return y * self._width + x

    # @intent:responsibility 全ピクセルを消灯します。
    def clear(self) -> None:
        self._pixels = bytearray(self._width * self._height)

    def get_pixel(self, x: int, y: int) -> int:
        return self._pixels[self._offset(x, y)]

    # @intent:responsibility 指定ピクセルをXORで反転します。
    # @intent:return 反転前に点灯していた（=消灯させた）場合にTrue。衝突判定に使用します。
    def toggle_pixel(self, x: int, y: int) -> bool:
        offset = self._offset(x, y)
        was_set = self._pixels[offset] == 1
        self._pixels[offset] ^= 1
        return was_set

    # @intent:responsibility 画面全体を行ごとのリストとしてコピーして返します（シェルの描画用）。
    def rows(self) -> List[List[int]]:
        return [list(self._pixels[y * self._width:(y + 1) * self._width]) for y in range(self._height)]

    def lit_pixels(self) -> List[Tuple[int, int]]:
        return [(i % self._width, i // self._width) for i, p in enumerate(self._pixels) if p]

    def to_text(self, on: str = "#", off: str = ".") -> str:
        return "\n".join("".join(on if p else off for p in row) for row in self.rows())


# @intent:responsibility 16キーの押下状態（レベルトリガ）を保持します。
# @intent:rationale 各キーの状態はリスト要素への単一代入で更新されるため、入力スレッドからの書き込みも
#                  キー単位で原子的に次のサイクルから見えます。
class Keypad:
    """
    16キー (0x0-0xF) の押下状態。シェルが毎サイクル前に現在押されているキーを書き込みます。
    デバウンスやエッジ検出は行いません。
    """
    def __init__(self):
        self._keys: List[bool] = [False] * NUM_KEYS

    @staticmethod
    def _check(key: int) -> None:
        if not 0 <= key < NUM_KEYS:
            raise InvalidKeyError(key)

    def set_key(self, key: int, pressed: bool) -> None:
        self._check(key)
        self._keys[key] = bool(pressed)

    def press(self, key: int) -> None:
        self.set_key(key, True)

    def release(self, key: int) -> None:
        self.set_key(key, False)

    def release_all(self) -> None:
        self._keys = [False] * NUM_KEYS

    def is_pressed(self, key: int) -> bool:
        self._check(key)
        return self._keys[key]

    # @intent:responsibility 押されているキーのうち最小のキー番号を返します。押されていなければNone。
    def first_pressed(self) -> Optional[int]:
        for key, pressed in enumerate(self._keys):
            if pressed:
                return key
        return None

    def state(self) -> Tuple[bool, ...]:
        return tuple(self._keys)


# @intent:responsibility 互換性に関わる挙動の選択肢（クワーク）を保持します。
@dataclass(frozen=True)
class Chip8Quirks:
    increment_index_on_block_transfer: bool = False  # Fx55/Fx65 の後に I += x + 1 とするか
    clip_sprites: bool = True  # False の場合、画面端をはみ出したスプライトは反対側へ回り込む


# @intent:responsibility 命令実行関数に渡す、CPU状態以外の実行環境をまとめます。
@dataclass
class Chip8Devices:
    framebuffer: Framebuffer = field(default_factory=Framebuffer)
    keypad: Keypad = field(default_factory=Keypad)
    quirks: Chip8Quirks = field(default_factory=Chip8Quirks)
    rng: random.Random = field(default_factory=random.Random)
