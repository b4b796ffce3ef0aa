import asyncio

from dishka import AsyncContainer

from core.container import build_container
from result.schemas import ResultArtifact
from transfer.usecases import RunStealthTransferTask


async def run(container: AsyncContainer) -> ResultArtifact:
    """
    Run the stealth transfer task once.

    Parameters
    ----------
    container : AsyncContainer
        Dependency container

    Returns
    -------
    ResultArtifact
        Descriptor written for the run
    """
    try:
        async with container() as request_container:
            task = await request_container.get(RunStealthTransferTask, component="transfer")
            return await task()
    finally:
        await container.close()


def main() -> None:
    asyncio.run(run(build_container()))


if __name__ == "__main__":
    main()
