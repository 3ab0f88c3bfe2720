from types import MappingProxyType

from nova.common.hwconf import REGISTER_COUNT

# Basic
HCF = 0x00  # halt and catch fire
ADD = 0x01  # R0 + R1 -> R2
SUB = 0x02  # R0 - R1 -> R2
DIV = 0x03  # R0 // R1 -> R2
MUL = 0x04  # R0 * R1 -> R2
LDI = 0x05  # S -> R[D], masked to size
MOV = 0x06  # M[S] -> M[D]
LDM = 0x07  # M[S] -> R[D]
STM = 0x08  # R[S] -> M[D]
SWP = 0x09  # R[D] upper <-> lower half
XCH = 0x0A  # R[S] <-> R[D]

# Bitwise
NOT = 0x0B  # R[S] ^ 0 -> R[D]
AND = 0x0C  # R[S] & R[D] -> R[D]
BOR = 0x0D  # R[S] | R[D] -> R[D]
XOR = 0x0E  # R[S] ^ R[D] -> R[D]

# Flow
JMP = 0x0F  # S -> PC
JEZ = 0x10  # D -> PC if R[S] == 0
JNZ = 0x11  # D -> PC if R[S] != 0

# Misc
OUT = 0x12  # R[D] -> debug sink
CPY = 0x13  # R[S] -> R[D]

# Emulated
MU = 0xFF   # no-op

# Size classes
BYTE = 0x00
WORD = 0x01
LONGWORD = 0x02
CONST_BYTE = 0x03
CONST_WORD = 0x04
CONST_LONGWORD = 0x05

SIZE_WIDTHS = MappingProxyType({
    BYTE: 1,
    WORD: 2,
    LONGWORD: 4,
    CONST_BYTE: 1,
    CONST_WORD: 2,
    CONST_LONGWORD: 4
})

SIZES = MappingProxyType({
    'byte': BYTE,
    'word': WORD,
    'longword': LONGWORD
})

REGISTERS = MappingProxyType({f'reg{i}': i for i in range(REGISTER_COUNT)})

OP_NAMES = MappingProxyType({
    HCF: 'hcf',
    ADD: 'add',
    SUB: 'sub',
    DIV: 'div',
    MUL: 'mul',
    LDI: 'loadi',
    MOV: 'move',
    LDM: 'load',
    STM: 'store',
    SWP: 'swap',
    XCH: 'exchange',
    NOT: 'not',
    AND: 'and',
    BOR: 'or',
    XOR: 'xor',
    JMP: 'jump',
    JEZ: 'jump-eq',
    JNZ: 'jump-neq',
    OUT: 'debug',
    CPY: 'copy',
    MU: 'mu'
})
