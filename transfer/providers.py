from dishka import Provider, Scope, provide, FromComponent
from credentials.resolver import SecretResolver
from result.writer import ResultWriter
from transfer.escrow_service import EscrowService
from transfer.services import ChainClientFactory
from transfer.usecases import ExecuteStealthTransferUseCase, RunStealthTransferTask
from typing import Annotated
from core.environment.config import Settings
import logging


class TransferProvider(Provider):
    """
    Provider for transfer-related dependencies.
    """

    component = "transfer"

    @provide(scope=Scope.APP)
    def get_chain_client_factory(
        self,
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> ChainClientFactory:
        """
        Provide chain client factory.

        Parameters
        ----------
        settings : Settings
            Task settings
        logger : logging.Logger
            Logger instance

        Returns
        -------
        ChainClientFactory
            Factory opening a chain client per RPC URL
        """
        return ChainClientFactory(settings=settings, logger=logger)

    @provide(scope=Scope.APP)
    def get_escrow_service(
        self,
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> EscrowService:
        """
        Provide escrow service.

        Parameters
        ----------
        settings : Settings
            Task settings
        logger : logging.Logger
            Logger instance

        Returns
        -------
        EscrowService
            Escrow service instance
        """
        return EscrowService(settings=settings, logger=logger)

    @provide(scope=Scope.REQUEST)
    def get_stealth_transfer_use_case(
        self,
        chain_client_factory: Annotated[ChainClientFactory, FromComponent("transfer")],
        escrow_service: Annotated[EscrowService, FromComponent("transfer")],
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> ExecuteStealthTransferUseCase:
        """
        Provide stealth transfer use case.

        Parameters
        ----------
        chain_client_factory : ChainClientFactory
            Chain client factory
        escrow_service : EscrowService
            Escrow service instance
        settings : Settings
            Task settings
        logger : logging.Logger
            Logger instance

        Returns
        -------
        ExecuteStealthTransferUseCase
            Stealth transfer use case
        """
        return ExecuteStealthTransferUseCase(
            chain_client_factory=chain_client_factory,
            escrow_service=escrow_service,
            settings=settings,
            logger=logger
        )

    @provide(scope=Scope.REQUEST)
    def get_run_task_use_case(
        self,
        resolver: Annotated[SecretResolver, FromComponent("credentials")],
        transfer: Annotated[ExecuteStealthTransferUseCase, FromComponent("transfer")],
        writer: Annotated[ResultWriter, FromComponent("result")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> RunStealthTransferTask:
        """
        Provide the task use case.

        Parameters
        ----------
        resolver : SecretResolver
            Secret resolver
        transfer : ExecuteStealthTransferUseCase
            Stealth transfer use case
        writer : ResultWriter
            Result writer
        logger : logging.Logger
            Logger instance

        Returns
        -------
        RunStealthTransferTask
            Task use case
        """
        return RunStealthTransferTask(
            resolver=resolver,
            transfer=transfer,
            writer=writer,
            logger=logger
        )
