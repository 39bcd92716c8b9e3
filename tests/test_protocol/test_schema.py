"""
Tests for the wire schema and contract kinds.
"""

import pytest

from trontx.protocol.contract_types import ENDPOINTS, ContractType
from trontx.protocol.schema import TransactionContract, message_class, type_url


class TestContractType:
    """Tests for ContractType."""

    def test_wire_tags(self) -> None:
        assert ContractType.TRANSFER == 1
        assert ContractType.CREATE_SMART_CONTRACT == 30
        assert ContractType.TRIGGER_SMART_CONTRACT == 31
        assert ContractType.CANCEL_ALL_UNFREEZE_V2 == 59

    def test_message_names(self) -> None:
        assert ContractType.TRANSFER.message_name == "TransferContract"
        assert ContractType.UNDELEGATE_RESOURCE.message_name == "UnDelegateResourceContract"

    @pytest.mark.parametrize("value", [ContractType.TRANSFER, 1, "TRANSFER", "TransferContract"])
    def test_parse(self, value) -> None:
        assert ContractType.parse(value) is ContractType.TRANSFER

    @pytest.mark.parametrize("value", ["transfer", 3, True, None])
    def test_parse_unknown(self, value) -> None:
        with pytest.raises(ValueError):
            ContractType.parse(value)

    def test_every_kind_has_message_and_endpoint(self) -> None:
        for kind in ContractType:
            assert message_class(kind.message_name) is not None
            assert kind in ENDPOINTS


class TestSchema:
    """Tests for the registered protobuf messages."""

    def test_type_url(self) -> None:
        assert type_url("TransferContract") == "type.googleapis.com/protocol.TransferContract"

    def test_full_name(self) -> None:
        assert message_class("TransferContract").DESCRIPTOR.full_name == "protocol.TransferContract"

    def test_contract_type_enum_scoped(self) -> None:
        enum = TransactionContract.DESCRIPTOR.fields_by_name["type"].enum_type
        assert enum.full_name == "protocol.TransactionContract.ContractType"
        assert enum.values_by_number[31].name == "TriggerSmartContract"

    def test_unknown_message(self) -> None:
        with pytest.raises(KeyError):
            message_class("NoSuchContract")

    def test_proposal_parameters_serialize_in_order(self) -> None:
        cls = message_class("ProposalCreateContract")
        message = cls(owner_address=b"\x41" * 21, parameters=[{"key": 1, "value": 2}, {"key": 3, "value": 4}])
        assert [p.key for p in cls.FromString(message.SerializeToString()).parameters] == [1, 3]
