from typing import Annotated
import logging

from dishka import Provider, Scope, provide, FromComponent
from core.environment.config import Settings
from result.writer import ResultWriter


class ResultProvider(Provider):
    """
    Provider for the result writer.
    """

    component = "result"

    @provide(scope=Scope.APP)
    def get_result_writer(
        self,
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> ResultWriter:
        """
        Provide result writer.

        Parameters
        ----------
        settings : Settings
            Task settings
        logger : logging.Logger
            Logger instance

        Returns
        -------
        ResultWriter
            Result writer writing into the output directory
        """
        return ResultWriter(
            result_path=settings.result_path,
            computed_path=settings.computed_path,
            logger=logger
        )
