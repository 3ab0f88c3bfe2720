''' Memory-mapped display window, read between steps by an external renderer '''

from typing import Iterator, Tuple, TypeAlias

from nova.common.hwconf import SCREEN_WIDTH, SCREEN_HEIGHT, SCREEN_PIXEL_SIZE
from nova.runtime.cpu import CPU

Color: TypeAlias = Tuple[int, int, int]


class Display:
    def __init__(self, proc: CPU):
        self.proc = proc

    def pixel(self, x: int, y: int) -> Color:
        if not (0 <= x < SCREEN_WIDTH and 0 <= y < SCREEN_HEIGHT):
            raise IndexError(f'Pixel ({x}, {y}) is off screen')

        o = (x + y * SCREEN_WIDTH) * SCREEN_PIXEL_SIZE
        view = self.proc.screen()
        return (view[o], view[o + 1], view[o + 2])

    def row(self, y: int) -> bytes:
        if not (0 <= y < SCREEN_HEIGHT):
            raise IndexError(f'Row {y} is off screen')

        stride = SCREEN_WIDTH * SCREEN_PIXEL_SIZE
        return bytes(self.proc.screen()[y * stride:(y + 1) * stride])

    def lit_pixels(self) -> Iterator[Tuple[int, int, Color]]:
        ''' Pixels that are not black, in row-major order '''
        view = self.proc.screen()

        for y in range(SCREEN_HEIGHT):
            for x in range(SCREEN_WIDTH):
                o = (x + y * SCREEN_WIDTH) * SCREEN_PIXEL_SIZE

                if view[o] or view[o + 1] or view[o + 2]:
                    yield (x, y, (view[o], view[o + 1], view[o + 2]))
