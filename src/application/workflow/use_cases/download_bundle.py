import asyncio
import os

from src.domain.workflow.exceptions import BundleUnreadableError
from src.domain.workflow.value_objects.results import BundleDownload
from src.ports.secondary.metrics import IMetrics
from src.ports.secondary.workflow_repository import IWorkflowRepository
from src.shared.config import settings
from src.shared.logger import get_logger

logger = get_logger(__name__)


class DownloadBundleUseCase:
    """
    Opens the Research Object bundle of a workflow for download.

    Bundles are produced after the record is created, so a known workflow may
    not have one yet. That case is reported exactly like an unknown id.
    """

    def __init__(
        self,
        workflow_repository: IWorkflowRepository,
        metrics: IMetrics | None = None,
        media_type: str = settings.BUNDLE_MEDIA_TYPE,
        filename: str = settings.BUNDLE_FILENAME,
    ):
        self._workflow_repository = workflow_repository
        self._metrics = metrics
        self._media_type = media_type
        self._filename = filename

    async def execute(self, workflow_id: str) -> BundleDownload | None:
        """
        Returns:
            The opened bundle, or None when the workflow or its bundle does not exist.
            The caller owns (and must close) the returned stream.

        Raises:
            BundleUnreadableError: the record points at a bundle that cannot be opened.
        """
        workflow = await self._workflow_repository.get_by_id(workflow_id)
        if workflow is None or not workflow.has_bundle:
            self._record("not_found")
            return None

        path = workflow.ro_bundle
        stream = None
        try:
            stream = await asyncio.to_thread(open, path, "rb")
            size = os.fstat(stream.fileno()).st_size
        except OSError as exc:
            if stream is not None:
                stream.close()
            logger.error("bundle_unreadable", workflow_id=workflow_id, path=path, error=str(exc))
            self._record("error")
            raise BundleUnreadableError(workflow_id, exc.strerror or str(exc))

        logger.info("bundle_download_started", workflow_id=workflow_id, path=path, size=size)
        self._record("served")
        return BundleDownload(
            stream=stream,
            media_type=self._media_type,
            filename=self._filename,
            size=size,
        )

    def _record(self, outcome: str) -> None:
        if self._metrics:
            self._metrics.record_download(outcome)
