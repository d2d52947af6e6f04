# src/chip8_tracer/arch/chip8/instructions/graphics.py
"""
画面命令（CLS, DRW）の実装。
"""
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState, FLAG_REGISTER
from chip8_tracer.arch.chip8.peripherals import Chip8Devices
from .base import Chip8Operation, InstructionKind, make_operation, reg, set_flag


def decode_cls(word: int) -> Chip8Operation:
    return make_operation(word, InstructionKind.CLS, "CLS")

def execute_cls(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    devices.framebuffer.clear()


def decode_drw(word: int) -> Chip8Operation:
    return make_operation(word, InstructionKind.DRW, "DRW", reg((word >> 8) & 0xF), reg((word >> 4) & 0xF), str(word & 0xF))

# @intent:responsibility Dxyn: I が指す n バイトのスプライトを (Vx, Vy) に XOR で描画します。
# @intent:post-condition 点灯していたピクセルを1つでも消灯させた場合 VF=1、そうでなければ VF=0。
def execute_drw(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    """
    各バイトは横8ピクセルを表し、最上位ビットが左端です。例えば I が指す5バイトが
    フォントの "0" (F0 90 90 90 F0) であれば、次の形が描かれます。

           ####....
           #..#....
           #..#....
           #..#....
           ####....

    描画原点は画面サイズで剰余を取ります。原点からはみ出した部分は、
    clip_sprites クワークが有効なら描画せず、無効なら反対側へ回り込ませます。
    """
    fb = devices.framebuffer
    clip = devices.quirks.clip_sprites
    x_origin = state.v[op.x] % fb.width
    y_origin = state.v[op.y] % fb.height
    state.v[FLAG_REGISTER] = 0

    collision = False
    for row in range(op.n):
        sprite_byte = bus.read((state.index + row) & 0xFFF)
        y = y_origin + row
        if y >= fb.height:
            if clip:
                break
            y %= fb.height

        for col in range(8):
            if not sprite_byte & (0x80 >> col):
                continue
            x = x_origin + col
            if x >= fb.width:
                if clip:
                    break
                x %= fb.width
            if fb.toggle_pixel(x, y):
                collision = True

    set_flag(state, collision)
