import logging
from pathlib import Path

import pyfiglet

from core.exceptions import DEFAULT_ERROR_MESSAGE
from transfer.entities import (
    EscrowConfirmed,
    EscrowFailed,
    TransferFailure,
    TransferOutcome,
    TransferSuccess,
)
from result.schemas import ResultArtifact

FAILURE_BANNER_TEXT = "Transfer failed"


class ResultWriter:
    """
    Writer for the banner and the computed descriptor of a run.

    Parameters
    ----------
    result_path : Path
        Banner file path
    computed_path : Path
        Descriptor file path
    logger : logging.Logger
        Logger instance
    """

    def __init__(self, result_path: Path, computed_path: Path, logger: logging.Logger):
        self.result_path = result_path
        self.computed_path = computed_path
        self.logger = logger

    def write(self, outcome: TransferOutcome) -> ResultArtifact:
        """
        Write the banner, then the descriptor.

        The descriptor is written even if the banner could not be.

        Parameters
        ----------
        outcome : TransferOutcome
            Outcome of the run

        Returns
        -------
        ResultArtifact
            Written descriptor
        """
        artifact = self.build_artifact(outcome)
        try:
            self.computed_path.parent.mkdir(parents=True, exist_ok=True)
            self.result_path.write_text(self.render_banner(outcome), encoding="utf-8")
        except Exception as e:
            self.logger.error(f"Failed to write result banner to {self.result_path}: {e}")
        finally:
            self.computed_path.write_text(artifact.to_json(), encoding="utf-8")
            self.logger.info(f"Result descriptor written to {self.computed_path}")
        return artifact

    def render_banner(self, outcome: TransferOutcome) -> str:
        """
        Render the human readable banner.

        Parameters
        ----------
        outcome : TransferOutcome
            Outcome of the run

        Returns
        -------
        str
            ASCII art banner
        """
        if isinstance(outcome, TransferSuccess):
            text = f"Transfer successful, {outcome.transaction_hash}"
        else:
            text = FAILURE_BANNER_TEXT
        return pyfiglet.figlet_format(text)

    def build_artifact(self, outcome: TransferOutcome) -> ResultArtifact:
        """
        Build the descriptor of an outcome.

        Parameters
        ----------
        outcome : TransferOutcome
            Outcome of the run

        Returns
        -------
        ResultArtifact
            Descriptor
        """
        output_path = str(self.result_path)
        if isinstance(outcome, TransferFailure):
            return ResultArtifact(
                deterministic_output_path=output_path,
                error_message=outcome.message or DEFAULT_ERROR_MESSAGE
            )

        artifact = ResultArtifact(
            deterministic_output_path=output_path,
            transaction_hash=outcome.transaction_hash,
            block_number=outcome.block_number,
            gas_used=str(outcome.gas_used)
        )
        escrow = outcome.escrow_update
        if isinstance(escrow, EscrowConfirmed):
            artifact.escrow_status = escrow.status
            artifact.escrow_transaction_hash = escrow.transaction_hash
        elif isinstance(escrow, EscrowFailed):
            artifact.escrow_status = escrow.status
            artifact.escrow_error_message = escrow.message
        return artifact
