"""Upload pipeline orchestrator.

:class:`UploadPipeline` runs one upload through every stage::

    validate -> [watermark] -> [compress] -> encode -> transmit -> interpret
             -> (backup on success)

Watermarking always precedes compression so the transmitted file is the
compressed rendition of the watermarked image.

Usage::

    import asyncio
    from imagebed import SourceFile, UploadConfig, UploadPipeline

    async def main():
        config = UploadConfig(api_url="https://img.example.com", auth_code="...")
        async with UploadPipeline() as pipeline:
            result = await pipeline.upload(SourceFile.from_path("cat.png"), config)
        print(result.markdown() if result.ok else result.error.message)

    asyncio.run(main())
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import httpx

from imagebed.api.multipart import encode_multipart
from imagebed.api.transport import AsyncImageBedTransport
from imagebed.api.upload import UPLOAD_FIELD_NAME, interpret_response
from imagebed.backup import BackupStorage, backup_file
from imagebed.config import UploadConfig
from imagebed.errors import BackupError, ImageBedError
from imagebed.image.compress import compress_image
from imagebed.image.raster import RasterSurface
from imagebed.image.state import UploadStateMachine
from imagebed.image.validate import validate_source
from imagebed.image.watermark import add_watermark
from imagebed.models import ProcessingWarning, SourceFile, UploadResult, UploadStage
from imagebed.observability import (
    MetricsHook,
    NoopMetricsHook,
    NoopNotifier,
    Notifier,
    get_logger,
)

log = get_logger("imagebed.pipeline")

WARNING_NOTICE_SECONDS = 3.0
"""How long a processing-warning notice stays visible."""


class UploadPipeline:
    """Asynchronous image upload pipeline.

    Collaborators are injected so the pipeline can run without a live
    host application.  Each :meth:`upload` call owns its own file chain,
    so concurrent calls on one pipeline do not interfere.

    Parameters
    ----------
    client:
        ``httpx.AsyncClient`` to send requests with.  Ignored when
        *transport* is given.
    transport:
        A ready transport.  Built from *client* when omitted.
    backup_storage:
        Where local backups are written.  Without one, backups are skipped
        even when enabled in the config.
    notifier:
        Host notification display.  Defaults to :class:`NoopNotifier`.
    metrics:
        Metrics backend.  Defaults to :class:`NoopMetricsHook`.
    surface:
        Imaging backend for the watermark and compression stages.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        transport: AsyncImageBedTransport | None = None,
        backup_storage: BackupStorage | None = None,
        notifier: Notifier | None = None,
        metrics: MetricsHook | None = None,
        surface: RasterSurface | None = None,
    ) -> None:
        self._metrics = metrics if metrics is not None else NoopMetricsHook()
        self._transport = transport if transport is not None else AsyncImageBedTransport(
            client=client, metrics=self._metrics,
        )
        self._backup_storage = backup_storage
        self._notifier = notifier if notifier is not None else NoopNotifier()
        self._surface = surface

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def upload(self, file: SourceFile, config: UploadConfig) -> UploadResult:
        """Validate, process, and upload *file*.

        Parameters
        ----------
        file:
            The image to upload.
        config:
            Options for this call.  Read-only.

        Returns
        -------
        UploadResult
            Carries the canonical URL on success.  Every
            :class:`ImageBedError` raised by a stage is returned as
            ``result.error`` instead of propagating.
        """
        machine = UploadStateMachine(file.name)
        warnings: list[ProcessingWarning] = []
        current: SourceFile | None = None

        try:
            machine.transition(UploadStage.VALIDATING)
            validate_source(file, config)
            current = file

            if config.show_upload_progress:
                self._notifier.notify("Uploading image...")

            if config.enable_watermark:
                machine.transition(UploadStage.WATERMARKING)
                current = await self._run_stage(
                    "watermark", warnings, add_watermark,
                    current,
                    config.watermark_text,
                    config.watermark_position,
                    config.watermark_size,
                    config.watermark_opacity,
                )

            if config.enable_client_compress:
                machine.transition(UploadStage.COMPRESSING)
                current = await self._run_stage(
                    "compress", warnings, compress_image,
                    current,
                    config.target_size,
                    config.compress_threshold,
                )

            machine.transition(UploadStage.ENCODING)
            body = encode_multipart(UPLOAD_FIELD_NAME, current)

            machine.transition(UploadStage.TRANSMITTING)
            payload = await self._transport.upload(config, body)

            machine.transition(UploadStage.INTERPRETING)
            url = interpret_response(payload, config)
        except ImageBedError as err:
            machine.transition(UploadStage.FAILED)
            return self._fail(err, file, current, warnings, config)

        machine.transition(UploadStage.SUCCEEDED)
        self._metrics.increment("imagebed.upload_success_total")
        self._metrics.gauge("imagebed.bytes_uploaded", current.byte_size)
        log.info(
            "Upload complete",
            extra={"extra_fields": {
                "op": "upload",
                "file_name": current.name,
                "mime_type": current.mime_type,
                "bytes": current.byte_size,
                "url": url,
                "stages": [s.value for s in machine.history],
            }},
        )

        if config.enable_local_backup and config.backup_path.strip():
            await self._backup(current, config)

        if config.show_success_notification:
            self._notifier.notify(
                f"Image uploaded: {url}", duration=config.notification_duration,
            )

        return UploadResult(
            url=url,
            file=current,
            warnings=warnings,
            stage=machine.state,
        )

    async def close(self) -> None:
        """Close the transport and release its resources."""
        await self._transport.close()

    async def __aenter__(self) -> UploadPipeline:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run_stage(
        self,
        stage: str,
        warnings: list[ProcessingWarning],
        func: Callable[..., SourceFile],
        *args: Any,
    ) -> SourceFile:
        """Run a blocking image stage in a worker thread.

        New warnings recorded by the stage are shown to the user.
        """
        seen = len(warnings)
        result = await asyncio.to_thread(
            lambda: func(*args, surface=self._surface, warnings=warnings)
        )
        for warning in warnings[seen:]:
            self._metrics.increment(
                "imagebed.processing_warnings_total", tags={"stage": stage},
            )
            self._notifier.notify(warning.message, duration=WARNING_NOTICE_SECONDS)
        return result

    async def _backup(self, file: SourceFile, config: UploadConfig) -> None:
        if self._backup_storage is None:
            log.warning(
                "Local backup is enabled but no backup storage is configured",
                extra={"extra_fields": {"op": "backup", "file_name": file.name}},
            )
            return
        try:
            await asyncio.to_thread(
                backup_file, self._backup_storage, config.backup_path, file,
            )
        except BackupError as err:
            self._metrics.increment("imagebed.backup_failure_total")
            log.error(
                "Local backup failed",
                exc_info=err,
                extra={"extra_fields": {"op": "backup", **err.context}},
            )

    def _fail(
        self,
        err: ImageBedError,
        original: SourceFile,
        processed: SourceFile | None,
        warnings: list[ProcessingWarning],
        config: UploadConfig,
    ) -> UploadResult:
        code = str(getattr(err.code, "value", err.code))
        self._metrics.increment("imagebed.upload_failure_total", tags={"code": code})
        log.warning(
            "Upload failed",
            extra={"extra_fields": {
                "op": "upload",
                "file_name": original.name,
                "code": code,
                "error": err.message,
                **err.context,
            }},
        )
        if config.show_error_notification:
            self._notifier.notify(f"Image upload failed: {err.message}")
        return UploadResult(
            error=err,
            file=processed,
            warnings=warnings,
            stage=UploadStage.FAILED,
        )


async def upload_image(
    file: SourceFile,
    config: UploadConfig,
    **kwargs,
) -> UploadResult:
    """Upload *file* with a one-off :class:`UploadPipeline`.

    Keyword arguments are forwarded to the :class:`UploadPipeline`
    constructor.
    """
    async with UploadPipeline(**kwargs) as pipeline:
        return await pipeline.upload(file, config)
