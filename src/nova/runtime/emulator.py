import sys
import time
from pathlib import Path
import logging as lg
import traceback
from typing import Callable, TypeAlias

import click

from nova.common.hwconf import TICKS_PER_FRAME, FRAME_RATE
import nova.runtime.cpu as cpu


EXIT_HALT = 0
EXIT_STEP_LIMIT = 2
EXIT_KEYBOARD = 3
EXIT_FAULT = 4
EXIT_EXEC_ERROR = 100

FrameCallback: TypeAlias = Callable[[cpu.CPU], None]


def run_frames(
    proc: cpu.CPU,
    ticks_per_frame: int = TICKS_PER_FRAME,
    max_steps: int | None = None,
    frame_rate: int = 0,
    on_frame: FrameCallback | None = None
) -> int:
    ''' Host loop: steps the machine in frames of at most ticks_per_frame records.

        on_frame is called between frames, never during a step, so a
        renderer may read the display window there. A non-zero frame_rate
        throttles the loop to that many frames per second.
    '''
    total = 0
    period = 1.0 / frame_rate if frame_rate else 0.0

    while not proc.halted:
        budget = ticks_per_frame

        if max_steps is not None:
            budget = min(budget, max_steps - total)

            if budget <= 0:
                break

        started = time.monotonic()
        total += proc.run_until_halt(budget)

        if on_frame is not None:
            on_frame(proc)

        remaining = period - (time.monotonic() - started)

        if not proc.halted and remaining > 0:
            time.sleep(remaining)

    return total


def execute(
    image: bytes,
    max_steps: int | None = None,
    ticks_per_frame: int = TICKS_PER_FRAME,
    frame_rate: int = 0,
    trace: bool = False,
    dump: bool = False
) -> cpu.CPU:
    proc = cpu.CPU(image, trace=trace)

    try:
        steps = run_frames(proc, ticks_per_frame, max_steps, frame_rate)
        lg.debug(f'Executed {steps} steps')

    finally:
        proc.debug_dump(lg.INFO if dump else lg.DEBUG)

    return proc


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.option('--trace', is_flag=True, help='Log every executed instruction')
@click.option('--max-steps', type=click.IntRange(min=1), default=None, help='Stop after this many steps')
@click.option('--ticks-per-frame', type=click.IntRange(min=1), default=TICKS_PER_FRAME, show_default=True)
@click.option('--frame-rate', type=click.IntRange(min=0), default=FRAME_RATE, show_default=True,
              help='Frames per second, 0 runs unthrottled')
@click.option('--dump', is_flag=True, help='Log the register file on exit')
@click.argument('image_filename', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def run(
    verbose: bool,
    trace: bool,
    max_steps: int | None,
    ticks_per_frame: int,
    frame_rate: int,
    dump: bool,
    image_filename: Path
):
    lg.basicConfig(level=lg.DEBUG if verbose or trace else lg.INFO)
    lg.info('NOVA')

    try:
        image = image_filename.read_bytes()
        proc = execute(image, max_steps, ticks_per_frame, frame_rate, trace, dump)

    except cpu.Fault as e:
        lg.info(f'Execution halted on {type(e).__name__}: {e}')
        sys.exit(EXIT_FAULT)

    except KeyboardInterrupt:
        lg.info('Execution halted by the user')
        sys.exit(EXIT_KEYBOARD)

    except Exception as e:
        lg.info(f'Execution halted on general error {e}')
        traceback.print_exc()
        sys.exit(EXIT_EXEC_ERROR)

    if not proc.halted:
        lg.info(f'Step limit of {max_steps} reached')
        sys.exit(EXIT_STEP_LIMIT)

    lg.info('Execution halted gracefully')
    sys.exit(EXIT_HALT)


if __name__ == '__main__':
    run()
