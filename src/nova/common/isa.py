''' Instruction record codec shared by the assembler and the runtime '''

import struct
from dataclasses import dataclass

import nova.common.ops as ops
from nova.common.hwconf import RECORD_SIZE

# opcode, size, source, dest
RECORD_FORMAT = '>BBII'

assert struct.calcsize(RECORD_FORMAT) == RECORD_SIZE


@dataclass(frozen=True)
class Instruction:
    opcode: int
    size: int = ops.BYTE
    source: int = 0
    dest: int = 0

    def pack(self) -> bytes:
        return struct.pack(RECORD_FORMAT, self.opcode, self.size, self.source, self.dest)

    @staticmethod
    def unpack(buf: bytes) -> 'Instruction':
        (opcode, size, source, dest) = struct.unpack(RECORD_FORMAT, buf)
        return Instruction(opcode, size, source, dest)

    def __str__(self) -> str:
        name = ops.OP_NAMES.get(self.opcode, f'0x{self.opcode:02X}')
        return f'{name} size:{self.size} src:0x{self.source:X} dst:0x{self.dest:X}'
