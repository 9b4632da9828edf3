"""Tests for transaction parsing and leaderboard projections."""

import pytest
from pydantic import ValidationError

from sialeaderboard.ledger.models import ContractEntry, LeaderEntry, Transaction
from sialeaderboard.ledger.projector import project_group_totals, project_leaderboard


def _wire_txn() -> dict:
    return {
        "siacoininputs": [],
        "filecontractrevisions": [{
            "parentid": "fcid_1",
            "unlockconditions": {"timelock": 0, "signaturesrequired": 2},
            "newrevisionnumber": 7,
            "newfilesize": 4096,
            "newwindowstart": 120000,
            "newwindowend": 120144,
            "newvalidproofoutputs": [
                {"value": "1000", "unlockhash": "renter_addr"},
                {"value": "123456789012345678901234567890", "unlockhash": "host_addr"},
            ],
            "newmissedproofoutputs": [],
        }],
        "transactionsignatures": [{"parentid": "fcid_1", "signature": "c2ln"}],
    }


class TestTransaction:

    def test_parses_revision_fields(self):
        txn = Transaction.model_validate(_wire_txn())
        rev = txn.file_contract_revisions[0]
        assert rev.parent_id == "fcid_1"
        assert rev.new_file_size == 4096
        assert rev.new_window_start == 120000
        assert rev.new_valid_proof_outputs[1].unlock_hash == "host_addr"
        assert rev.new_valid_proof_outputs[1].value == 123456789012345678901234567890

    def test_wire_encoding_preserves_unknown_fields(self):
        wire = _wire_txn()
        encoded = Transaction.model_validate(wire).to_wire()
        assert encoded["transactionsignatures"] == wire["transactionsignatures"]
        rev = encoded["filecontractrevisions"][0]
        assert rev["unlockconditions"] == wire["filecontractrevisions"][0]["unlockconditions"]
        assert rev["newwindowend"] == 120144
        assert rev["newvalidproofoutputs"][1]["value"] == "123456789012345678901234567890"

    def test_wire_encoding_is_unchanged_submission(self):
        wire = _wire_txn()
        assert Transaction.model_validate(wire).to_wire() == wire

    def test_wire_encoding_adds_no_defaults(self):
        wire = {"filecontractrevisions": [{
            "parentid": "fcid_1",
            "newvalidproofoutputs": [{"value": "5"}],
        }]}
        assert Transaction.model_validate(wire).to_wire() == wire

    def test_missing_revisions_default_empty(self):
        assert Transaction.model_validate({}).file_contract_revisions == []

    def test_negative_size_rejected(self):
        wire = _wire_txn()
        wire["filecontractrevisions"][0]["newfilesize"] = -1
        with pytest.raises(ValidationError):
            Transaction.model_validate(wire)

    def test_non_numeric_value_rejected(self):
        wire = _wire_txn()
        wire["filecontractrevisions"][0]["newvalidproofoutputs"][1]["value"] = "lots"
        with pytest.raises(ValidationError):
            Transaction.model_validate(wire)


class _User:
    def __init__(self, name, groups, sizes, last_modified=0):
        self.name = name
        self.groups = groups
        self.contracts = {
            f"{name}_{i}": ContractEntry(id=f"{name}_{i}", size=s, end_height=1, host_output="h")
            for i, s in enumerate(sizes)
        }
        self.last_modified = last_modified


class TestProjections:

    def test_leaderboard_sums_contracts(self):
        rows = project_leaderboard([
            _User("alice", ["g1"], [100, 200], last_modified=5),
            _User("bob", [], []),
        ])
        by_name = {r.name: r for r in rows}
        assert by_name["alice"].size == 300
        assert by_name["alice"].timestamp == 5
        assert by_name["bob"].size == 0

    def test_leaderboard_json_shape(self):
        row = project_leaderboard([_User("alice", ["g1"], [1])])[0]
        assert row.model_dump(mode="json") == {
            "name": "alice", "size": 1, "groups": ["g1"], "timestamp": 0,
        }

    def test_group_totals(self):
        entries = [
            LeaderEntry(name="a", size=10, groups=["x", "y"], timestamp=0),
            LeaderEntry(name="b", size=5, groups=["x"], timestamp=0),
            LeaderEntry(name="c", size=7, groups=[], timestamp=0),
        ]
        assert project_group_totals(entries) == {"x": 15, "y": 10}
