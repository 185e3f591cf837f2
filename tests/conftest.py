import pytest

from acct_coder.idl import Idl

COUNTER = {"name": "counter", "type": {"kind": "struct", "fields": [{"name": "n", "type": "u64"}]}}
GAUGE = {"name": "gauge", "type": {"kind": "struct", "fields": [{"name": "n", "type": "u64"}]}}


@pytest.fixture
def legacy_idl() -> Idl:
    return Idl.from_dict({"accounts": [COUNTER, GAUGE]})


@pytest.fixture
def versioned_idl() -> Idl:
    return Idl.from_dict({"layoutVersion": 0, "accounts": [COUNTER, GAUGE]})


@pytest.fixture(params=["legacy", "versioned"])
def any_idl(request, legacy_idl, versioned_idl) -> Idl:
    return legacy_idl if request.param == "legacy" else versioned_idl
