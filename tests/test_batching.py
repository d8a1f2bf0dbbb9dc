from sygma_relay.batching import (
    TRANSFER_GAS_COST,
    Batch,
    are_proposals_executed,
    pending_proposals,
    proposal_batches,
    session_id,
    signature_bytes,
)
from sygma_relay.evm_messages import EVMProposal
from sygma_relay.message import Message, Metadata
from sygma_relay.proposal import Proposal


class EchoHandler:
    """Turns a message into an EVM proposal carrying the message's fields."""

    def handle_message(self, m):
        return EVMProposal(
            source=m.source,
            destination=m.destination,
            deposit_nonce=m.deposit_nonce,
            resource_id=m.resource_id,
            data=b"\x01",
            handler_address="handler",
            bridge_address="bridge",
            metadata=m.metadata,
        )


class FakeBridge:
    def __init__(self, executed=(), failing=()):
        self.executed = set(executed)
        self.failing = set(failing)

    def is_proposal_executed(self, proposal):
        if proposal.deposit_nonce in self.failing:
            raise RuntimeError("error")
        return proposal.deposit_nonce in self.executed


def _messages(*nonces, gas=None):
    metadata = Metadata(data={"gasLimit": gas}) if gas is not None else Metadata()
    return [Message(source=1, destination=2, deposit_nonce=n, metadata=metadata) for n in nonces]


def _nonces(batch):
    return [p.deposit_nonce for p in batch.proposals]


def test_default_gas_cost_without_metadata():
    batches = proposal_batches(_messages(1), EchoHandler(), FakeBridge(), 10**9)
    assert batches[0].gas_limit == 200000


def test_single_batch_under_limit():
    batches = proposal_batches(_messages(1, 2), EchoHandler(), FakeBridge(), 10 * TRANSFER_GAS_COST)
    assert len(batches) == 1
    assert _nonces(batches[0]) == [1, 2]
    assert batches[0].gas_limit == 2 * TRANSFER_GAS_COST


def test_proposal_reaching_limit_opens_new_batch():
    batches = proposal_batches(
        _messages(1, 2, 3), EchoHandler(), FakeBridge(), 3 * TRANSFER_GAS_COST - 1
    )
    assert [_nonces(b) for b in batches] == [[1, 2], [3]]
    assert batches[0].gas_limit == 3 * TRANSFER_GAS_COST
    assert batches[1].gas_limit == 0


def test_metadata_gas_limit_used():
    batches = proposal_batches(_messages(1, gas=50), EchoHandler(), FakeBridge(), 1000)
    assert batches[0].gas_limit == 50


def test_executed_proposals_skipped():
    batches = proposal_batches(_messages(1, 2), EchoHandler(), FakeBridge(executed={1, 2}), 10**9)
    assert batches == [Batch()]


def test_batches_hold_plain_proposals():
    batches = proposal_batches(_messages(7), EchoHandler(), FakeBridge(), 10**9)
    proposal = batches[0].proposals[0]
    assert isinstance(proposal, Proposal)
    assert (proposal.origin_domain_id, proposal.destination, proposal.data) == (1, 2, b"\x01")


def test_pending_proposals_filters_executed():
    proposals = pending_proposals(_messages(1, 2, 3), EchoHandler(), FakeBridge(executed={2}))
    assert [p.deposit_nonce for p in proposals] == [1, 3]


def test_are_proposals_executed():
    proposals = [Proposal(1, 2, n, bytes(32), b"") for n in (1, 2)]
    assert are_proposals_executed(FakeBridge(executed={1, 2}), proposals) is True
    assert are_proposals_executed(FakeBridge(executed={1}), proposals) is False
    assert are_proposals_executed(FakeBridge(executed={1, 2}, failing={2}), proposals) is False


def test_signature_bytes_layout():
    sig = signature_bytes(b"\x01", b"\x02", b"\x01")
    assert len(sig) == 65
    assert sig[:32] == bytes(31) + b"\x01"
    assert sig[32:64] == bytes(31) + b"\x02"
    assert sig[64] == 28


def test_signature_bytes_recovery_zero():
    assert signature_bytes(bytes(32), bytes(32), b"\x00")[-1] == 27


def test_session_id_prefix_and_hex():
    digest = bytes([0xAB, 0x01])
    result = session_id(digest)
    assert result.startswith("signing-")
    assert bytes.fromhex(result[len("signing-"):]) == digest