"""
Tests for post-assembly alteration of unsigned transactions.
"""

from dataclasses import replace

import pytest

from trontx.builders import mutator
from trontx.builders.transaction import EnvelopeState, compute_tx_id, derive_contract_address
from trontx.errors import InvalidRangeError, InvalidStringError, StateMutationError


@pytest.fixture
def envelope(factory, assembler, owner, receiver, reference_block):
    return assembler.assemble(factory.send_trx(receiver, 10, owner), reference_block)


@pytest.fixture
def deployment(factory, assembler, owner, reference_block):
    message = factory.create_smart_contract(abi=[], bytecode="6080604052", owner=owner)
    return assembler.assemble(message, reference_block)


# =============================================================================
# extend_expiration
# =============================================================================


class TestExtendExpiration:
    """Tests for extend_expiration()."""

    def test_extends_and_rehashes(self, envelope) -> None:
        extended = mutator.extend_expiration(envelope, 3600)
        assert extended.expiration == envelope.expiration + 3_600_000
        assert extended.tx_id != envelope.tx_id
        assert extended.tx_id == compute_tx_id(extended.raw_data)
        assert extended.state is EnvelopeState.EXTENDED

    def test_parameter_unchanged(self, envelope) -> None:
        extended = mutator.extend_expiration(envelope, 60)
        assert extended.parameter == envelope.parameter
        assert extended.ref_block_hash == envelope.ref_block_hash
        assert extended.timestamp == envelope.timestamp

    def test_input_not_modified(self, envelope) -> None:
        before = envelope.raw_data
        mutator.extend_expiration(envelope, 60)
        assert envelope.raw_data == before
        assert envelope.state is EnvelopeState.ASSEMBLED

    def test_extend_twice(self, envelope) -> None:
        twice = mutator.extend_expiration(mutator.extend_expiration(envelope, 60), 60)
        assert twice.expiration == envelope.expiration + 120_000

    @pytest.mark.parametrize("extension", [0, -5, 1.5, "soon", None])
    def test_invalid_extension(self, envelope, extension) -> None:
        with pytest.raises(InvalidRangeError):
            mutator.extend_expiration(envelope, extension)

    def test_after_data_attached(self, envelope) -> None:
        attached = mutator.attach_data(envelope, "memo")
        with pytest.raises(StateMutationError) as exc_info:
            mutator.extend_expiration(attached, 60)
        assert exc_info.value.details["from_state"] == "DATA_ATTACHED"

    def test_recomputes_contract_address(self, deployment, owner_hex) -> None:
        extended = mutator.extend_expiration(deployment, 60)
        assert extended.contract_address != deployment.contract_address
        assert extended.contract_address == derive_contract_address(extended.tx_id, bytes.fromhex(owner_hex))


# =============================================================================
# attach_data
# =============================================================================


class TestAttachData:
    """Tests for attach_data()."""

    def test_utf8(self, envelope) -> None:
        attached = mutator.attach_data(envelope, "invoice 42")
        assert attached.data == b"invoice 42"
        assert attached.state is EnvelopeState.DATA_ATTACHED
        assert attached.tx_id != envelope.tx_id

    def test_hex(self, envelope) -> None:
        assert mutator.attach_data(envelope, "0xcafe", "hex").data == b"\xca\xfe"

    def test_replaces_previous(self, envelope) -> None:
        attached = mutator.attach_data(mutator.attach_data(envelope, "first"), "second")
        assert attached.data == b"second"

    def test_after_extension(self, envelope) -> None:
        attached = mutator.attach_data(mutator.extend_expiration(envelope, 60), "memo")
        assert attached.expiration == envelope.expiration + 60_000

    def test_empty_payload(self, envelope) -> None:
        with pytest.raises(InvalidStringError):
            mutator.attach_data(envelope, "")

    def test_bad_hex(self, envelope) -> None:
        with pytest.raises(InvalidStringError):
            mutator.attach_data(envelope, "xyz", "hex")

    def test_unknown_format(self, envelope) -> None:
        with pytest.raises(StateMutationError):
            mutator.attach_data(envelope, "memo", "base64")


# =============================================================================
# regenerate_id
# =============================================================================


class TestRegenerateId:
    """Tests for regenerate_id()."""

    def test_same_bytes_same_id(self, envelope) -> None:
        resealed = mutator.regenerate_id(envelope)
        assert resealed.tx_id == envelope.tx_id
        assert resealed.raw_data == envelope.raw_data
        assert resealed.state is EnvelopeState.RESEALED

    def test_idempotent(self, envelope) -> None:
        once = mutator.regenerate_id(mutator.attach_data(envelope, "memo"))
        assert mutator.regenerate_id(once) == once

    def test_nothing_else_after_reseal(self, envelope) -> None:
        resealed = mutator.regenerate_id(envelope)
        with pytest.raises(StateMutationError):
            mutator.extend_expiration(resealed, 60)
        with pytest.raises(StateMutationError):
            mutator.attach_data(resealed, "memo")


# =============================================================================
# Rejections and alter_transaction
# =============================================================================


class TestRejections:
    """Signed and corrupted envelopes cannot be altered."""

    @pytest.mark.parametrize(
        "operation",
        [
            lambda e: mutator.extend_expiration(e, 60),
            lambda e: mutator.attach_data(e, "memo"),
            mutator.regenerate_id,
        ],
    )
    def test_signed(self, envelope, operation) -> None:
        signed = replace(envelope, signature=("ab" * 65,))
        with pytest.raises(StateMutationError, match="signed"):
            operation(signed)

    def test_unparseable(self, envelope) -> None:
        corrupted = replace(envelope, raw_data=b"\xff\xff\xff\xff")
        with pytest.raises(StateMutationError):
            mutator.regenerate_id(corrupted)


class TestAlterTransaction:
    """Tests for alter_transaction()."""

    def test_both(self, envelope) -> None:
        altered = mutator.alter_transaction(envelope, data="memo", extension=60)
        assert altered.data == b"memo"
        assert altered.expiration == envelope.expiration + 60_000
        assert altered.state is EnvelopeState.DATA_ATTACHED

    def test_same_as_sequential(self, envelope) -> None:
        sequential = mutator.attach_data(mutator.extend_expiration(envelope, 60), "memo")
        assert mutator.alter_transaction(envelope, data="memo", extension=60) == sequential

    def test_extension_only(self, envelope) -> None:
        assert mutator.alter_transaction(envelope, extension=60).state is EnvelopeState.EXTENDED

    def test_nothing_requested(self, envelope) -> None:
        with pytest.raises(StateMutationError):
            mutator.alter_transaction(envelope)
