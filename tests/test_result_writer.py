import json
import logging
from unittest.mock import patch

import pytest

from result.writer import ResultWriter
from transfer.entities import EscrowConfirmed, EscrowFailed, TransferFailure, TransferSuccess
from tests.fakes import ESCROW_TX_HASH, TX_HASH


@pytest.fixture
def writer(tmp_path) -> ResultWriter:
    return ResultWriter(
        result_path=tmp_path / "result.txt",
        computed_path=tmp_path / "computed.json",
        logger=logging.getLogger("stealth_transfer.tests")
    )


def read_computed(writer: ResultWriter) -> dict:
    return json.loads(writer.computed_path.read_text(encoding="utf-8"))


class TestResultWriter:
    """
    Unit tests for the banner and computed descriptor.
    """

    def test_success_descriptor(self, writer: ResultWriter, tmp_path):
        writer.write(TransferSuccess(transaction_hash=TX_HASH, block_number=42, gas_used=21000))

        assert read_computed(writer) == {
            "deterministic-output-path": f"{tmp_path}/result.txt",
            "transaction-hash": TX_HASH,
            "block-number": 42,
            "gas-used": "21000",
        }
        assert writer.result_path.read_text(encoding="utf-8").strip()

    def test_failure_descriptor(self, writer: ResultWriter, tmp_path):
        writer.write(TransferFailure(message="Total amount is required"))

        assert read_computed(writer) == {
            "deterministic-output-path": f"{tmp_path}/result.txt",
            "error-message": "Total amount is required",
        }

    def test_failure_without_message_uses_fallback(self, writer: ResultWriter):
        writer.write(TransferFailure(message=""))
        assert read_computed(writer)["error-message"] == "Oops something went wrong"

    def test_failure_banner_does_not_embed_error(self, writer: ResultWriter):
        first = writer.render_banner(TransferFailure(message="nonce too low"))
        second = writer.render_banner(TransferFailure(message="Transaction failed"))
        assert first == second

    def test_escrow_outcome_is_reported(self, writer: ResultWriter):
        writer.write(TransferSuccess(
            transaction_hash=TX_HASH,
            block_number=42,
            gas_used=21000,
            escrow_update=EscrowConfirmed(transaction_hash=ESCROW_TX_HASH)
        ))

        computed = read_computed(writer)
        assert computed["escrow-status"] == "confirmed"
        assert computed["escrow-transaction-hash"] == ESCROW_TX_HASH

    def test_failed_escrow_outcome_keeps_transfer_hash(self, writer: ResultWriter):
        writer.write(TransferSuccess(
            transaction_hash=TX_HASH,
            block_number=42,
            gas_used=21000,
            escrow_update=EscrowFailed(message="execution reverted")
        ))

        computed = read_computed(writer)
        assert computed["transaction-hash"] == TX_HASH
        assert computed["escrow-status"] == "failed"
        assert computed["escrow-error-message"] == "execution reverted"
        assert "error-message" not in computed

    def test_descriptor_is_deterministic(self, writer: ResultWriter):
        outcome = TransferSuccess(transaction_hash=TX_HASH, block_number=42, gas_used=21000)

        writer.write(outcome)
        first = writer.computed_path.read_bytes()
        writer.write(outcome)

        assert writer.computed_path.read_bytes() == first

    def test_descriptor_written_when_banner_fails(self, writer: ResultWriter):
        with patch("result.writer.pyfiglet.figlet_format", side_effect=RuntimeError("font missing")):
            writer.write(TransferSuccess(transaction_hash=TX_HASH, block_number=42, gas_used=21000))

        assert read_computed(writer)["transaction-hash"] == TX_HASH
        assert not writer.result_path.exists()

    def test_output_directory_is_created(self, tmp_path):
        writer = ResultWriter(
            result_path=tmp_path / "out" / "result.txt",
            computed_path=tmp_path / "out" / "computed.json",
            logger=logging.getLogger("stealth_transfer.tests")
        )

        writer.write(TransferFailure(message="Transaction failed"))
        assert read_computed(writer)["error-message"] == "Transaction failed"
