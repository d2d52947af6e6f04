# src/chip8_tracer/arch/chip8/instructions/maps.py
"""
命令語と命令実装のマッピング定義。
"""
from . import alu
from . import control
from . import graphics
from . import keys
from . import load
from .base import InstructionKind

# @intent:map 命令語の上位ニブルからデコード関数へのマッピングテーブル。
DECODE_MAP = {
    0x0: control.decode_family_0,
    0x1: control.decode_jp,
    0x2: control.decode_call,
    0x3: control.decode_se_imm,
    0x4: control.decode_sne_imm,
    0x5: control.decode_se_reg,
    0x6: alu.decode_ld_imm,
    0x7: alu.decode_add_imm,
    0x8: alu.decode_family_8,
    0x9: control.decode_sne_reg,
    0xA: load.decode_ld_i,
    0xB: control.decode_jp_v0,
    0xC: alu.decode_rnd,
    0xD: graphics.decode_drw,
    0xE: keys.decode_family_e,
    0xF: load.decode_family_f,
}

# @intent:map 命令種別から実行関数へのマッピングテーブル。InstructionKindの全メンバーを網羅します。
EXECUTE_MAP = {
    # Control
    InstructionKind.RET: control.execute_ret,
    InstructionKind.JP: control.execute_jp,
    InstructionKind.CALL: control.execute_call,
    InstructionKind.JP_V0: control.execute_jp_v0,
    InstructionKind.SE_IMM: control.execute_se_imm,
    InstructionKind.SNE_IMM: control.execute_sne_imm,
    InstructionKind.SE_REG: control.execute_se_reg,
    InstructionKind.SNE_REG: control.execute_sne_reg,
    InstructionKind.UNKNOWN: control.execute_unknown,

    # ALU
    InstructionKind.LD_IMM: alu.execute_ld_imm,
    InstructionKind.ADD_IMM: alu.execute_add_imm,
    InstructionKind.LD_REG: alu.execute_ld_reg,
    InstructionKind.OR: alu.execute_or,
    InstructionKind.AND: alu.execute_and,
    InstructionKind.XOR: alu.execute_xor,
    InstructionKind.ADD_REG: alu.execute_add_reg,
    InstructionKind.SUB: alu.execute_sub,
    InstructionKind.SHR: alu.execute_shr,
    InstructionKind.SUBN: alu.execute_subn,
    InstructionKind.SHL: alu.execute_shl,
    InstructionKind.RND: alu.execute_rnd,

    # Graphics
    InstructionKind.CLS: graphics.execute_cls,
    InstructionKind.DRW: graphics.execute_drw,

    # Keys
    InstructionKind.SKP: keys.execute_skp,
    InstructionKind.SKNP: keys.execute_sknp,
    InstructionKind.LD_VX_K: keys.execute_ld_vx_k,

    # Load/Store
    InstructionKind.LD_I: load.execute_ld_i,
    InstructionKind.LD_VX_DT: load.execute_ld_vx_dt,
    InstructionKind.LD_DT_VX: load.execute_ld_dt_vx,
    InstructionKind.LD_ST_VX: load.execute_ld_st_vx,
    InstructionKind.ADD_I_VX: load.execute_add_i_vx,
    InstructionKind.LD_F_VX: load.execute_ld_f_vx,
    InstructionKind.LD_B_VX: load.execute_ld_b_vx,
    InstructionKind.LD_MEM_VX: load.execute_ld_mem_vx,
    InstructionKind.LD_VX_MEM: load.execute_ld_vx_mem,
}
