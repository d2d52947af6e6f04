# chip8_tracer/core/errors.py
"""
例外と警告の定義。

致命的な構成エラー・資源枯渇は例外として送出し、
未知の命令語のような回復可能な異常は警告として報告します。
"""


# @intent:responsibility プログラムイメージがメモリに収まらないことを示します。
class ProgramTooLargeError(ValueError):
    def __init__(self, size: int, capacity: int):
        super().__init__(f"Program of {size} bytes exceeds available memory ({capacity} bytes).")
        self.size = size
        self.capacity = capacity


# @intent:responsibility サブルーチン呼び出しのネストがスタック容量を超えたことを示します。
class StackOverflowError(RuntimeError):
    pass


# @intent:responsibility 空のスタックからの復帰を示します。
class StackUnderflowError(RuntimeError):
    pass


# @intent:responsibility キーパッドの範囲外（0x0-0xF以外）のキー番号を示します。
class InvalidKeyError(ValueError):
    def __init__(self, key: int):
        super().__init__(f"Key {key:#x} is outside the keypad range 0x0-0xF.")
        self.key = key


# @intent:responsibility 未知の命令語を検出したことを通知する警告。実行は継続されます。
class UnknownOpcodeWarning(RuntimeWarning):
    pass
