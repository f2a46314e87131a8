import pytest


SAMPLE = """5 3
1 1 E
RFRFRFRF

3 2 N
FRRFLLFFRRFLL

0 3 W
LLFFFLFLFL"""


@pytest.fixture
def sample_text() -> str:
    return SAMPLE
