import sys
from pathlib import Path
import logging as lg

import click

from nova.nasm.asm import assemble_file
from nova.nasm.errors import AssemblerError

EXIT_OK = 0
EXIT_COMPILE_ERROR = 1


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.argument('source', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('binary', type=click.Path(dir_okay=False, path_type=Path))
def compile(verbose: bool, source: Path, binary: Path):
    lg.basicConfig(level=lg.DEBUG if verbose else lg.INFO)
    lg.info('NOVA ASM')

    try:
        assemble_file(source, binary)

    except AssemblerError as e:
        lg.error(f'{source}:{e}')
        sys.exit(EXIT_COMPILE_ERROR)

    lg.info(f'Written {binary}')
    sys.exit(EXIT_OK)


if __name__ == '__main__':
    compile()
