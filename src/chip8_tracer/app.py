# src/chip8_tracer/app.py
"""
ヘッドレス・トレーサーのエントリポイント。
構成ファイルとプログラムイメージを読み込み、指定サイクル数だけ実行して
各サイクルのトレースと最終的な画面をテキストで出力します。
"""
import argparse
import sys
from typing import List, Optional

from chip8_tracer.config.loader import ConfigLoader
from chip8_tracer.config.builder import SystemBuilder
from chip8_tracer.config.models import SystemConfig
from chip8_tracer.loader.loader import BinaryLoader


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chip8-tracer",
        description="Runs a CHIP-8 program headlessly and prints an instruction trace."
    )
    parser.add_argument(
        "rom", help="the raw program image to load at 0x200")
    parser.add_argument(
        "-c", "--config", help="YAML system configuration (default: built-in memory map)",
        default=None, dest="config")
    parser.add_argument(
        "-n", "--cycles", help="number of cycles to execute (default is 100)",
        type=int, default=100, dest="cycles")
    parser.add_argument(
        "-k", "--key", help="hex key (0-F) held down for the whole run; may be repeated",
        action="append", default=[], dest="keys")
    parser.add_argument(
        "-q", "--quiet", help="do not print the per-cycle trace",
        action="store_true", dest="quiet")
    return parser


# @intent:responsibility コマンドライン引数に従ってシステムを構築し、実行します。
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = ConfigLoader().load_from_file(args.config) if args.config else SystemConfig()
    cpu, bus = SystemBuilder().build_system(config)
    BinaryLoader().load_binary(args.rom, bus)

    for key in args.keys:
        cpu.keypad.press(int(key, 16))

    for _ in range(args.cycles):
        pc = cpu.get_state().pc
        snapshot = cpu.advance_cycle()
        if not args.quiet:
            beep = "  BEEP" if snapshot.metadata.sound_active else ""
            print(f"{pc:03X}  {snapshot.operation.opcode_hex}  {snapshot.metadata.symbol_info}{beep}")

    print(cpu.framebuffer.to_text())
    if cpu.unknown_opcode_count:
        print(f"{cpu.unknown_opcode_count} unknown opcode(s) skipped", file=sys.stderr)
    return 0


if __name__ == '__main__':
    sys.exit(main())
