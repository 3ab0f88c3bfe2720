KILOBYTE = 1024
MEGABYTE = 1024 * KILOBYTE

RECORD_SIZE = 10                # opcode, size, source(4), dest(4)
REGISTER_COUNT = 16
REGISTER_MASK = 0xFFFFFFFF      # registers are 32 bit wide

ROM_BASE = 0x00000000
ROM_SIZE = 2 * MEGABYTE
RAM_BASE = ROM_BASE + ROM_SIZE
RAM_SIZE = 512 * KILOBYTE
MEMORY_SIZE = ROM_SIZE + RAM_SIZE

SCREEN_WIDTH = 320
SCREEN_HEIGHT = 240
SCREEN_PIXEL_SIZE = 3           # red, green, blue
SCREEN_SIZE_PIXELS = SCREEN_WIDTH * SCREEN_HEIGHT
SCREEN_SIZE_BYTES = SCREEN_SIZE_PIXELS * SCREEN_PIXEL_SIZE
SCREEN_RAM_OFFSET = RAM_SIZE - SCREEN_SIZE_BYTES
SCREEN_BASE = RAM_BASE + SCREEN_RAM_OFFSET     # display window sits at the top of RAM

TICKS_PER_FRAME = 500_000       # Default host loop budget
FRAME_RATE = 60
