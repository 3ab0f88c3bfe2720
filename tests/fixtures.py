# type: ignore
import pytest

import nova.runtime.cpu as cpu


@pytest.fixture
def debug_output():
    yield []


@pytest.fixture
def machine(debug_output):
    ''' Factory for a CPU whose debug output lands in debug_output '''
    def build(image: bytes = b'') -> cpu.CPU:
        return cpu.CPU(image, sink=debug_output.append)

    yield build
