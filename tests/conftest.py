import pytest

from tests.factories import rec


@pytest.fixture
def make_record():
    return rec


@pytest.fixture
def dataset():
    return [
        rec("TESLA", "MODEL 3", "2020", "266", county="King", city="Seattle"),
        rec("NISSAN", "LEAF", "2018", "151", county="King", city="Bellevue"),
        rec("TESLA", "MODEL Y", "2021", "0", county="Snohomish", city="Everett"),
        rec("CHEVROLET", "VOLT", "2017", "53", "Plug-in Hybrid Electric Vehicle (PHEV)", county="Pierce", city="Tacoma"),
        rec("TESLA", "MODEL S", "2020", "", county="King", city="Seattle"),
        rec("NISSAN", "LEAF", "2020", "149", county="Snohomish", city="Lynnwood"),
    ]
