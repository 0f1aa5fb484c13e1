import concurrent.futures
import traceback
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from ..config.settings import ConverterConfig
from ..domain.exceptions import ProcessingException
from ..domain.media import EncodeTarget, MediaProfile, probe_media
from ..domain.results import BatchReport, FileResult
from ..services.compression_controller import CompressionController
from ..services.compressor import PaletteCompressor
from ..services.file_processing_service import (
    FilesystemGateway,
    ProcessFiles,
    output_path_for,
    processed_path_for,
    reset_temp_folder,
)
from ..services.logging_service import new_trace_id
from ..services.transcoder import GifTranscoder
from ..utils.format_utils import formatted_size, size_in_kb

Prober = Callable[[Path], MediaProfile]


class GifBatchPipeline:
    """
    Converts every file under the input folder into a GIF under the output folder.

    Files are independent: each one is probed, transcoded, compressed and
    written by one worker of a bounded thread pool. Probing, transcoding and
    compression run in parallel; everything that touches the output namespace
    goes through the shared `FilesystemGateway`. A failure is logged and
    recorded in the `BatchReport`, and never affects other files.

    The engine adapters are injectable so the pipeline can run against fakes.
    """

    def __init__(
        self,
        config: ConverterConfig,
        prober: Optional[Prober] = None,
        transcoder: Optional[GifTranscoder] = None,
        compressor: Optional[PaletteCompressor] = None,
        gateway: Optional[FilesystemGateway] = None,
    ):
        self.config = config
        self.input_root = config.input_folder.resolve()
        self.output_root = config.output_folder.resolve()
        self.prober = prober or probe_media
        self.transcoder = transcoder or GifTranscoder()
        self.controller = CompressionController(
            compressor or PaletteCompressor(), max_size_kb=config.max_gif_size_kb
        )
        self.gateway = gateway or FilesystemGateway()

    def process_file(self, source: Path) -> FileResult:
        trace = new_trace_id()
        with logger.contextualize(trace=trace):
            target: Optional[EncodeTarget] = None
            try:
                profile = self.prober(source)
                target = EncodeTarget.from_profile(
                    profile, self.config.max_gif_fps, self.config.max_gif_height_px
                )
                logger.info(f'Processing file: "{source.name}"')

                gif_data = self.transcoder.transcode(source, target)
                logger.debug(f"Transcoded {source.name}: {size_in_kb(len(gif_data))}kb at {target.fps}fps/{target.height}p")

                compression = self.controller.run(
                    gif_data,
                    on_step=lambda step, max_step: logger.info(
                        f"Applying additional color compression [{step}/{max_step}]"
                    ),
                )

                output_path = output_path_for(
                    source, self.input_root, self.output_root, compression.step
                )
                self.gateway.ensure_dir(output_path.parent)
                logger.info(
                    f'Writing output file: "{output_path.name}"; size = {size_in_kb(len(compression.data))}kb; '
                    f"scale = {target.height}p; framerate={target.fps}fps; compression = {compression.step}"
                )
                self.gateway.write_bytes(output_path, compression.data)

                processed_path = None
                if self.config.move_processed_files:
                    processed_path = processed_path_for(
                        source, self.input_root, self.output_root
                    )
                    logger.info(f'Moving processed file: "{source}" -> "{processed_path}"')
                    self.gateway.move(source, processed_path)

                return FileResult(
                    source=source,
                    trace=trace,
                    ok=True,
                    output_path=output_path,
                    processed_path=processed_path,
                    compression_step=compression.step,
                    size_bytes=len(compression.data),
                    target=target,
                )
            except ProcessingException as e:
                logger.error(f'Failed to process file "{source.name}" ({e.error_kind}):\n{e}')
                return FileResult.failure(source, trace, e.error_kind, str(e), target)
            except Exception as e:
                tb_str = "".join(traceback.format_exception(e))
                logger.error(f'Failed to process file "{source.name}" (unexpected):\n{tb_str}')
                return FileResult.failure(
                    source, trace, ProcessingException.error_kind, f"{type(e).__name__}: {e}", target
                )

    def _process_all(self, files, report: BatchReport):
        max_workers = max(1, self.config.max_workers)
        logger.info(f"Converting {len(files)} file(s) with {max_workers} worker(s).")

        executor = concurrent.futures.ThreadPoolExecutor(max_workers=max_workers)
        try:
            futures = {executor.submit(self.process_file, path): path for path in files}
            for future in concurrent.futures.as_completed(futures):
                report.add(future.result())
        except KeyboardInterrupt:
            logger.warning("Interrupted: cancelling files that have not started yet.")
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        finally:
            executor.shutdown(wait=True)

    def run(self) -> BatchReport:
        """
        Converts the whole input tree and returns the batch report.

        The temp folder is cleared afterwards no matter how individual files
        fared, including when the run is interrupted.
        """
        report = BatchReport()
        try:
            self.gateway.ensure_dir(self.output_root)
            files_handler = ProcessFiles(self.input_root, exclude_dir=self.output_root)
            if not files_handler.files:
                logger.info(f"No files to convert in {self.config.input_folder}")
            else:
                self._process_all(files_handler.files, report)
        finally:
            reset_temp_folder(self.config.temp_folder)
            report.finish()

        logger.info(
            f"Finished: {len(report.succeeded)} converted, {len(report.failed)} failed, {report.total} total; "
            f"{formatted_size(report.bytes_written)} written."
        )
        if self.config.batch_report_file:
            report.write_yaml(self.config.batch_report_file)
        return report
