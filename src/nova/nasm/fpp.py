import struct
import logging as lg
from typing import Dict, Tuple

from nova.common.isa import Instruction
from nova.nasm.errors import Position, DuplicateLabelError, UnresolvedLabelError

# Byte offsets of the 4-byte fields inside a record
SOURCE_FIELD = 2
DEST_FIELD = 6


class FPP:
    ''' First pass processor '''
    buffer: bytearray
    label_dict: Dict[str, int]
    patches: Dict[int, Tuple[str, Position]]

    def __init__(self):
        self.buffer = bytearray()
        self.label_dict = dict()
        self.patches = dict()

    @property
    def offset(self) -> int:
        return len(self.buffer)

    # Handlers
    def issue_record(self, opcode: int, size: int = 0, source: int = 0, dest: int = 0) -> int:
        offset = self.offset
        inst = Instruction(opcode, size, source, dest)
        lg.debug(f'Issuing {inst} @ 0x{offset:X}')
        self.buffer += inst.pack()
        return offset

    def on_label(self, labelname: str, position: Position):
        if labelname in self.label_dict:
            raise DuplicateLabelError(labelname, position)

        self.label_dict[labelname] = self.offset
        lg.debug(f'Label {labelname} @ 0x{self.offset:X}')

    def on_ref(self, record_offset: int, field: int, labelname: str, position: Position):
        lg.debug(f'Ref {labelname}')
        self.patches[record_offset + field] = (labelname, position)

    # Second pass
    def resolve(self) -> bytes:
        bytestr = bytearray(self.buffer)

        for patch_offset in sorted(self.patches):
            (labelname, position) = self.patches[patch_offset]

            if labelname not in self.label_dict:
                raise UnresolvedLabelError(labelname, position)

            label_offset = self.label_dict[labelname]
            bytestr[patch_offset:patch_offset + 4] = struct.pack('>I', label_offset)
            lg.debug(f'Patched 0x{patch_offset:X} -> {labelname} @ 0x{label_offset:X}')

        return bytes(bytestr)
