import struct
import logging as lg
from typing import Callable, Tuple, TypeAlias

import nova.common.ops as ops
from nova.common.isa import Instruction
from nova.common.hwconf import (
    RECORD_SIZE, REGISTER_COUNT, REGISTER_MASK,
    ROM_BASE, ROM_SIZE, RAM_BASE, RAM_SIZE, MEMORY_SIZE, SCREEN_RAM_OFFSET
)


class Halt(Exception):
    pass


class Fault(Exception):
    ''' Fatal machine error. Carries the address of the faulting record '''
    pc: int | None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.pc = None

    def __str__(self) -> str:
        if self.pc is None:
            return self.message

        return f'{self.message} at PC 0x{self.pc:X}'


class MemoryProtectionFault(Fault):
    pass


class UnknownOpcodeFault(Fault):
    def __init__(self, opcode: int):
        super().__init__(f'Unknown opcode 0x{opcode:02X}')
        self.opcode = opcode


class ArithmeticFault(Fault):
    pass


class AddressFault(Fault):
    pass


class OperandFault(Fault):
    pass


DebugSink: TypeAlias = Callable[[int], None]


def stdout_sink(value: int):
    print(value)


# Operand struct formats by size class
FORMATS = {
    ops.BYTE: '>B',
    ops.WORD: '>H',
    ops.LONGWORD: '>I'
}


class CPU():
    pc: int         # Address of the record to execute next
    gp: list[int]   # General purpose registers
    halted: bool
    steps: int      # Records fetched so far, faulting ones included

    def __init__(self, image: bytes = b'', sink: DebugSink = stdout_sink, trace: bool = False):
        if len(image) > ROM_SIZE:
            raise ValueError(f'Image of {len(image)} bytes does not fit into ROM')

        self.rom = bytes(image) + bytes(ROM_SIZE - len(image))
        self.ram = bytearray(RAM_SIZE)
        self.sink = sink
        self.trace = trace

        self.pc = ROM_BASE      # Execution starts from the beginning of ROM
        self.gp = [0] * REGISTER_COUNT
        self.halted = False
        self.steps = 0

    # - Helpers - #

    def debug_dump(self, level: int = lg.DEBUG):
        state = [f'PC:{self.pc:X}', f'HALTED:{int(self.halted)}']
        state.extend([f'R{i}:{self.gp[i]:X}' for i in range(len(self.gp))])
        lg.log(level, ' '.join(state))

    def screen(self) -> memoryview:
        ''' Read-only view of the memory-mapped display window '''
        return memoryview(self.ram)[SCREEN_RAM_OFFSET:].toreadonly()

    def read(self, addr: int, width: int) -> bytes:
        end = addr + width

        if addr < 0 or end > MEMORY_SIZE:
            raise AddressFault(f'Read of {width} bytes at 0x{addr:X} is out of memory')

        if end <= RAM_BASE:
            return self.rom[addr:end]

        if addr >= RAM_BASE:
            return bytes(self.ram[addr - RAM_BASE:end - RAM_BASE])

        # Straddles ROM and RAM
        return self.rom[addr:] + bytes(self.ram[:end - RAM_BASE])

    def write(self, addr: int, data: bytes):
        if addr < RAM_BASE:
            raise MemoryProtectionFault(f'Write to ROM at 0x{addr:X}')

        if addr + len(data) > MEMORY_SIZE:
            raise AddressFault(f'Write of {len(data)} bytes at 0x{addr:X} is out of memory')

        m = addr - RAM_BASE
        self.ram[m:m + len(data)] = data

    def reg_index(self, field: int) -> int:
        index = field & 0xFF

        if index >= REGISTER_COUNT:
            raise OperandFault(f'Bad register index {index}')

        return index

    def get_gp(self, field: int) -> int:
        return self.gp[self.reg_index(field)]

    def set_gp(self, field: int, val: int):
        self.gp[self.reg_index(field)] = val & REGISTER_MASK

    def operand(self, size: int) -> Tuple[str, int]:
        ''' struct format and width in bytes of a sized operand '''
        if size not in FORMATS:
            raise OperandFault(f'Bad size class {size}')

        return (FORMATS[size], ops.SIZE_WIDTHS[size])

    def arithm_pair(self, op: Callable[[int, int], int]):
        self.gp[2] = op(self.gp[0], self.gp[1]) & REGISTER_MASK

    def bitwise_pair(self, inst: Instruction, op: Callable[[int, int], int]):
        self.set_gp(inst.dest, op(self.get_gp(inst.source), self.get_gp(inst.dest)))

    def jump_target(self, size: int, field: int) -> int:
        if size == ops.BYTE:
            addr = self.get_gp(field)
        elif size == ops.CONST_LONGWORD:
            addr = field
        else:
            raise OperandFault(f'Bad jump size class {size}')

        if addr % RECORD_SIZE != 0 or addr + RECORD_SIZE > MEMORY_SIZE:
            raise AddressFault(f'Bad jump target 0x{addr:X}')

        return addr

    # - Operations - #

    def hcf(self, inst: Instruction):
        self.halted = True
        raise Halt()

    def add(self, inst: Instruction):
        self.arithm_pair(lambda a, b: a + b)

    def sub(self, inst: Instruction):
        self.arithm_pair(lambda a, b: a - b)

    def div(self, inst: Instruction):
        if self.gp[1] == 0:
            raise ArithmeticFault('Division by zero')

        self.arithm_pair(lambda a, b: a // b)

    def mul(self, inst: Instruction):
        self.arithm_pair(lambda a, b: a * b)

    def ldi(self, inst: Instruction):
        (_, width) = self.operand(inst.size)
        mask = (1 << (8 * width)) - 1
        self.set_gp(inst.dest, inst.source & mask)

    def mov(self, inst: Instruction):
        (_, width) = self.operand(inst.size)
        self.write(inst.dest, self.read(inst.source, width))

    def ldm(self, inst: Instruction):
        (fmt, width) = self.operand(inst.size)
        (v,) = struct.unpack(fmt, self.read(inst.source, width))
        self.set_gp(inst.dest, v)

    def stm(self, inst: Instruction):
        (fmt, width) = self.operand(inst.size)
        mask = (1 << (8 * width)) - 1
        self.write(inst.dest, struct.pack(fmt, self.get_gp(inst.source) & mask))

    def swp(self, inst: Instruction):
        v = self.get_gp(inst.dest)
        self.set_gp(inst.dest, (v << 16) | (v >> 16))

    def xch(self, inst: Instruction):
        a = self.reg_index(inst.source)
        b = self.reg_index(inst.dest)
        self.gp[a], self.gp[b] = self.gp[b], self.gp[a]

    def inv(self, inst: Instruction):
        # XOR against zero, the source value is copied unchanged
        self.set_gp(inst.dest, self.get_gp(inst.source) ^ 0)

    def band(self, inst: Instruction):
        self.bitwise_pair(inst, lambda a, b: a & b)

    def bor(self, inst: Instruction):
        self.bitwise_pair(inst, lambda a, b: a | b)

    def xor(self, inst: Instruction):
        self.bitwise_pair(inst, lambda a, b: a ^ b)

    def jmp(self, inst: Instruction):
        self.pc = self.jump_target(inst.size, inst.source)

    def jez(self, inst: Instruction):
        if self.get_gp(inst.source) == 0:
            self.pc = self.jump_target(inst.size, inst.dest)

    def jnz(self, inst: Instruction):
        if self.get_gp(inst.source) != 0:
            self.pc = self.jump_target(inst.size, inst.dest)

    def out(self, inst: Instruction):
        self.sink(self.get_gp(inst.dest))

    def cpy(self, inst: Instruction):
        self.set_gp(inst.dest, self.get_gp(inst.source))

    def mu(self, inst: Instruction):
        lg.debug('mu')

    HANDLERS = {
        ops.HCF: hcf,
        ops.ADD: add,
        ops.SUB: sub,
        ops.DIV: div,
        ops.MUL: mul,
        ops.LDI: ldi,
        ops.MOV: mov,
        ops.LDM: ldm,
        ops.STM: stm,
        ops.SWP: swp,
        ops.XCH: xch,
        ops.NOT: inv,
        ops.AND: band,
        ops.BOR: bor,
        ops.XOR: xor,
        ops.JMP: jmp,
        ops.JEZ: jez,
        ops.JNZ: jnz,
        ops.OUT: out,
        ops.CPY: cpy,
        ops.MU: mu
    }

    # -- Implementation -- #

    def step(self):
        ''' Executes exactly one record. Raises Halt once the machine has stopped '''
        if self.halted:
            raise Halt()

        pc = self.pc

        try:
            inst = Instruction.unpack(self.read(pc, RECORD_SIZE))
            self.pc = pc + RECORD_SIZE
            self.steps += 1

            if self.trace:
                lg.debug(f'0x{pc:06X}: {inst}')

            handler = self.HANDLERS.get(inst.opcode)

            if handler is None:
                raise UnknownOpcodeFault(inst.opcode)

            handler(self, inst)

        except Fault as fault:
            fault.pc = pc
            self.pc = pc
            self.halted = True
            raise

    def run_until_halt(self, max_steps: int | None = None) -> int:
        ''' Steps until halted; returns the number of records executed.

            Faults propagate to the caller. When max_steps is reached the
            machine is left running, so the caller can tell both outcomes
            apart by looking at `halted`.
        '''
        if self.halted:
            return 0

        executed = 0

        try:
            while max_steps is None or executed < max_steps:
                self.step()
                executed += 1

        except Halt:
            # hcf itself completed
            executed += 1

        return executed
