"""Conversion engine for single files and directory batches."""

import os
import threading
import time
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

import structlog

from imgconv.config import Settings
from imgconv.core.batch.models import (
    BatchFailure,
    BatchItem,
    BatchItemStatus,
    BatchResult,
    BatchStatus,
)
from imgconv.core.constants import (
    DEFAULT_AVIF_SPEED,
    DEFAULT_BATCH_WORKERS,
    DEFAULT_PNG_COMPRESS_LEVEL,
    DEFAULT_WEBP_METHOD,
    TEMP_FILE_PREFIX,
    TEMP_FILE_SUFFIX,
)
from imgconv.core.conversion.codec import ImageCodec
from imgconv.core.exceptions import (
    DirectoryError,
    EncodeError,
    FileIOError,
    ImageConverterError,
    UnsupportedFormatError,
    ValidationError,
)
from imgconv.core.formats import SupportedFormat, canonical_extension, parse_format
from imgconv.models.conversion import (
    ConversionRequest,
    ConversionResult,
    ConversionSettings,
)
from imgconv.utils.logging import LoggingContext, new_run_id

logger = structlog.get_logger()

PathLike = Union[str, Path]
FormatLike = Union[SupportedFormat, str]
BatchCallback = Callable[[BatchItem], None]

# (file_index, input_path, output_path)
BatchJob = Tuple[int, Path, Path]


def _create_temp_file(directory: Path) -> Tuple[int, str]:
    """Open a new, uniquely named file in ``directory`` for writing.

    Created with mode 0666 so the process umask applies, as it would for
    a plain ``open()``.
    """
    temp_name = os.path.join(
        directory, f"{TEMP_FILE_PREFIX}{uuid.uuid4().hex}{TEMP_FILE_SUFFIX}"
    )
    flags = os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0)
    return os.open(temp_name, flags, 0o666), temp_name


class ConversionEngine:
    """Converts images between the supported formats.

    The engine holds one set of encoder settings. ``quality`` is clamped
    to 0-100 on construction and is only a hint for lossy encoders.
    """

    def __init__(
        self,
        quality: int,
        codec: Optional[ImageCodec] = None,
        *,
        png_compress_level: int = DEFAULT_PNG_COMPRESS_LEVEL,
        webp_method: int = DEFAULT_WEBP_METHOD,
        avif_speed: int = DEFAULT_AVIF_SPEED,
        atomic_writes: bool = True,
        report_skipped: bool = False,
        max_workers: int = DEFAULT_BATCH_WORKERS,
    ) -> None:
        self.settings = ConversionSettings(
            quality=quality,
            png_compress_level=png_compress_level,
            webp_method=webp_method,
            avif_speed=avif_speed,
        )
        self.codec = codec or ImageCodec()
        self.atomic_writes = atomic_writes
        self.report_skipped = report_skipped
        self.max_workers = max(1, max_workers)

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> "ConversionEngine":
        """Build an engine from application settings."""
        options = {
            "quality": settings.default_quality,
            "png_compress_level": settings.png_compress_level,
            "webp_method": settings.webp_method,
            "avif_speed": settings.avif_speed,
            "atomic_writes": settings.atomic_writes,
            "report_skipped": settings.report_skipped,
            "max_workers": settings.batch_workers,
        }
        options.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**options)

    @property
    def quality(self) -> int:
        return self.settings.quality

    # ------------------------------------------------------------------
    # Single file
    # ------------------------------------------------------------------

    def convert(
        self,
        input_path: PathLike,
        output_path: PathLike,
        target_format: FormatLike,
    ) -> ConversionResult:
        """Convert one image file.

        The input is decoded according to its own content; ``target_format``
        alone decides the output encoding. The output path's extension is only
        part of the destination name.

        Raises:
            ValidationError: If the output path has no extension (no I/O done).
            UnsupportedFormatError: If ``target_format`` is an unknown string.
            FileIOError: If the input is missing or the output directory is not usable.
            DecodeError: If the input is not a decodable image.
            EncodeError: If encoding or writing the output fails.
        """
        request = self._build_request(input_path, output_path, target_format)
        start_time = time.perf_counter()

        self._check_paths(request)

        with self.codec.decode(request.input_path) as raster:
            logger.info(
                "Image loaded",
                input_file=request.input_path.name,
                source_format=raster.source_format.value,
                width=raster.width,
                height=raster.height,
            )

            try:
                data = self.codec.encode(raster, request.target_format, self.settings)
            except EncodeError as e:
                e.details.setdefault("output_path", str(request.output_path))
                raise

            self._write_output(request.output_path, data)

            result = ConversionResult(
                input_path=request.input_path,
                output_path=request.output_path,
                target_format=request.target_format,
                source_format=raster.source_format,
                width=raster.width,
                height=raster.height,
                output_size=len(data),
                processing_time=time.perf_counter() - start_time,
            )

        logger.info(
            "Conversion completed",
            output_file=request.output_path.name,
            target_format=request.target_format.value,
            output_size=result.output_size,
        )
        return result

    def _build_request(
        self,
        input_path: PathLike,
        output_path: PathLike,
        target_format: FormatLike,
    ) -> ConversionRequest:
        """Validate arguments without touching the filesystem."""
        output_path = Path(output_path)
        if not output_path.suffix:
            raise ValidationError(
                f"Output file must have a valid extension: {output_path}",
                details={"field_name": "output_path", "field_value": str(output_path)},
            )

        target_format = self._resolve_format(target_format)

        try:
            named_format = parse_format(output_path.suffix[1:])
        except UnsupportedFormatError:
            named_format = None
        if named_format is not target_format:
            logger.warning(
                "Output extension does not match target format",
                output_file=output_path.name,
                target_format=target_format.value,
            )

        return ConversionRequest(
            input_path=Path(input_path),
            output_path=output_path,
            target_format=target_format,
        )

    @staticmethod
    def _resolve_format(target_format: FormatLike) -> SupportedFormat:
        if isinstance(target_format, SupportedFormat):
            return target_format
        return parse_format(target_format)

    @staticmethod
    def _check_paths(request: ConversionRequest) -> None:
        if not request.input_path.is_file():
            raise FileIOError(
                f"Input file does not exist: {request.input_path}",
                details={"path": str(request.input_path), "operation": "read"},
            )

        output_dir = request.output_path.parent
        if not output_dir.is_dir():
            raise FileIOError(
                f"Output directory does not exist: {output_dir}",
                details={"path": str(output_dir), "operation": "write"},
            )

    def _write_output(self, output_path: Path, data: bytes) -> None:
        """Write encoded bytes, atomically unless disabled."""
        if not self.atomic_writes:
            try:
                output_path.write_bytes(data)
            except OSError as e:
                raise EncodeError(
                    f"Failed to write {output_path}: {e.strerror or e}",
                    details={"output_path": str(output_path), "reason": str(e)},
                ) from e
            return

        try:
            fd, temp_name = _create_temp_file(output_path.parent)
        except OSError as e:
            raise FileIOError(
                f"Output directory is not writable: {output_path.parent}",
                details={
                    "path": str(output_path.parent),
                    "operation": "write",
                    "reason": str(e),
                },
            ) from e

        try:
            with os.fdopen(fd, "wb") as temp_file:
                temp_file.write(data)
                temp_file.flush()
                os.fsync(temp_file.fileno())
            os.replace(temp_name, output_path)
        except OSError as e:
            try:
                os.unlink(temp_name)
            except FileNotFoundError:
                pass
            raise EncodeError(
                f"Failed to write {output_path}: {e.strerror or e}",
                details={"output_path": str(output_path), "reason": str(e)},
            ) from e

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def batch_convert(
        self,
        input_dir: PathLike,
        output_dir: PathLike,
        target_format: FormatLike,
        *,
        on_item: Optional[BatchCallback] = None,
        cancel_event: Optional[threading.Event] = None,
        max_workers: Optional[int] = None,
    ) -> BatchResult:
        """Convert every supported image directly inside ``input_dir``.

        Subdirectories and files whose extension is not a supported format
        are skipped. A file that fails to convert is reported through
        ``on_item`` and the run continues; only directory errors abort it.

        Args:
            input_dir: Directory to scan (not recursive)
            output_dir: Destination, created with its parents if missing
            target_format: Format every output is encoded to
            on_item: Called once per finished file, from the calling thread
            cancel_event: When set, files not yet started are left alone
            max_workers: Parallel conversions; defaults to the engine setting

        Returns:
            BatchResult whose ``converted_count`` equals the number of
            completed notifications.

        Raises:
            DirectoryError: If the output directory cannot be created or the
                input directory cannot be listed.
            UnsupportedFormatError: If ``target_format`` is an unknown string.
        """
        input_dir = Path(input_dir)
        output_dir = Path(output_dir)
        target_format = self._resolve_format(target_format)

        result = BatchResult(
            batch_id=new_run_id(),
            input_dir=input_dir,
            output_dir=output_dir,
            target_format=target_format,
            status=BatchStatus.INITIALIZING,
        )

        with LoggingContext(batch_id=result.batch_id):
            self._ensure_output_dir(output_dir)

            result.status = BatchStatus.SCANNING
            jobs = self._plan_batch(
                input_dir, output_dir, target_format, result, on_item
            )

            logger.info(
                "Batch conversion started",
                files=len(jobs),
                skipped=len(result.skipped),
                target_format=target_format.value,
            )

            result.status = BatchStatus.PROCESSING
            workers = max(1, max_workers or self.max_workers)
            if workers == 1 or len(jobs) <= 1:
                cancelled = self._run_sequential(
                    jobs, target_format, result, on_item, cancel_event
                )
            else:
                cancelled = self._run_parallel(
                    jobs, target_format, result, on_item, cancel_event, workers
                )

            result.status = (
                BatchStatus.CANCELLED if cancelled else BatchStatus.COMPLETED
            )
            result.completed_at = datetime.now(timezone.utc)

            logger.info(
                "Batch conversion completed",
                converted=result.converted_count,
                failed=result.failed_count,
                skipped=len(result.skipped),
                status=result.status.value,
            )

        return result

    @staticmethod
    def _ensure_output_dir(output_dir: Path) -> None:
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryError(
                f"Cannot create output directory {output_dir}: {e.strerror or e}",
                details={
                    "path": str(output_dir),
                    "operation": "mkdir",
                    "reason": str(e),
                },
            ) from e

    def _plan_batch(
        self,
        input_dir: Path,
        output_dir: Path,
        target_format: SupportedFormat,
        result: BatchResult,
        on_item: Optional[BatchCallback],
    ) -> List[BatchJob]:
        try:
            entries = sorted(input_dir.iterdir())
        except OSError as e:
            raise DirectoryError(
                f"Cannot read input directory {input_dir}: {e.strerror or e}",
                details={
                    "path": str(input_dir),
                    "operation": "list",
                    "reason": str(e),
                },
            ) from e

        jobs: List[BatchJob] = []
        seen_outputs = set()
        for index, entry in enumerate(entries):
            if not entry.is_file():
                continue

            try:
                parse_format(entry.suffix[1:])
            except UnsupportedFormatError:
                result.skipped.append(entry)
                logger.debug("Skipping unsupported file", input_file=entry.name)
                if self.report_skipped:
                    self._notify(
                        on_item,
                        BatchItem(
                            file_index=index,
                            input_path=entry,
                            status=BatchItemStatus.SKIPPED,
                            error_message=f"Unsupported format: {entry.suffix[1:]}",
                        ),
                    )
                continue

            output_name = f"{entry.stem}.{canonical_extension(target_format)}"
            output_path = output_dir / output_name
            if output_path in seen_outputs:
                logger.warning(
                    "Output name collision, later file overwrites earlier one",
                    output_file=output_path.name,
                )
            seen_outputs.add(output_path)
            jobs.append((index, entry, output_path))

        return jobs

    def _run_sequential(
        self,
        jobs: List[BatchJob],
        target_format: SupportedFormat,
        result: BatchResult,
        on_item: Optional[BatchCallback],
        cancel_event: Optional[threading.Event],
    ) -> bool:
        for job in jobs:
            if cancel_event is not None and cancel_event.is_set():
                logger.info(
                    "Batch conversion cancelled",
                    remaining=len(jobs) - result.attempted_count,
                )
                return True
            self._record(result, self._convert_entry(job, target_format), on_item)
        return False

    def _run_parallel(
        self,
        jobs: List[BatchJob],
        target_format: SupportedFormat,
        result: BatchResult,
        on_item: Optional[BatchCallback],
        cancel_event: Optional[threading.Event],
        workers: int,
    ) -> bool:
        cancelled = False
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="imgconv"
        ) as executor:
            futures = [
                executor.submit(
                    self._convert_unless_cancelled, job, target_format, cancel_event
                )
                for job in jobs
            ]
            # Workers only return outcomes; counting and callbacks stay on this thread
            for future in as_completed(futures):
                item = future.result()
                if item is None:
                    cancelled = True
                    continue
                self._record(result, item, on_item)

        if cancelled:
            logger.info(
                "Batch conversion cancelled",
                remaining=len(jobs) - result.attempted_count,
            )
        return cancelled

    def _convert_unless_cancelled(
        self,
        job: BatchJob,
        target_format: SupportedFormat,
        cancel_event: Optional[threading.Event],
    ) -> Optional[BatchItem]:
        if cancel_event is not None and cancel_event.is_set():
            return None
        return self._convert_entry(job, target_format)

    def _convert_entry(
        self, job: BatchJob, target_format: SupportedFormat
    ) -> BatchItem:
        """Convert one batch entry, turning any failure into a failed item."""
        file_index, input_path, output_path = job
        start_time = time.perf_counter()
        try:
            conversion = self.convert(input_path, output_path, target_format)
        except ImageConverterError as e:
            return BatchItem(
                file_index=file_index,
                input_path=input_path,
                output_path=output_path,
                status=BatchItemStatus.FAILED,
                error_message=e.message,
                error_code=e.error_code,
                processing_time=time.perf_counter() - start_time,
            )
        except Exception as e:
            logger.exception(
                "Unexpected error converting file", input_file=input_path.name
            )
            return BatchItem(
                file_index=file_index,
                input_path=input_path,
                output_path=output_path,
                status=BatchItemStatus.FAILED,
                error_message=str(e) or type(e).__name__,
                error_code="CONV500",
                processing_time=time.perf_counter() - start_time,
            )

        return BatchItem(
            file_index=file_index,
            input_path=input_path,
            output_path=output_path,
            status=BatchItemStatus.COMPLETED,
            width=conversion.width,
            height=conversion.height,
            processing_time=conversion.processing_time,
        )

    def _record(
        self,
        result: BatchResult,
        item: BatchItem,
        on_item: Optional[BatchCallback],
    ) -> None:
        if item.status == BatchItemStatus.COMPLETED:
            result.converted_count += 1
            logger.info("File converted", input_file=item.filename)
        else:
            result.failures.append(
                BatchFailure(
                    path=item.input_path,
                    error_message=item.error_message or "",
                    error_code=item.error_code or "",
                )
            )
            logger.warning(
                "File conversion failed",
                input_file=item.filename,
                error=item.error_message,
                error_code=item.error_code,
            )
        self._notify(on_item, item)

    @staticmethod
    def _notify(on_item: Optional[BatchCallback], item: BatchItem) -> None:
        if on_item is None:
            return
        try:
            on_item(item)
        except Exception as e:
            logger.error("Error in batch progress callback", error=str(e))
