"""
Pipeline engine for the presence monitor.

Runs the single-threaded producer loop: read a frame, detect, suppress
duplicate boxes, update identities, and hand changed subject sets to the
publish dispatcher. Publishing itself happens on the dispatcher's workers.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

import cv2

from detection.suppression import suppress_detections
from models.config import Config
from models.detection import Detection
from models.frame import FrameData
from models.subject import TrackingResult
from observation import ObservationSource, OpenCVSource, OpenCVSourceConfig
from runtime.context import RuntimeContext
from pipeline.stages.annotate import draw_subjects


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline engine.

    Attributes:
        iou_threshold: Suppression threshold for duplicate boxes.
        retry_delay: Seconds to wait after an empty frame.
        stats_log_interval: Seconds between status log messages.
        display: Show the annotated frame in an OpenCV window.
        window_name: Title of the debug window.
    """
    iou_threshold: float = 0.5
    retry_delay: float = 0.001
    stats_log_interval: float = 60.0
    display: bool = False
    window_name: str = "Frame"


@dataclass
class PipelineStats:
    """Runtime statistics for the pipeline."""
    frame_count: int = 0
    empty_frames: int = 0
    change_count: int = 0
    report_count: int = 0
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)

    @property
    def fps(self) -> float:
        elapsed = time.time() - self.start_time
        return self.frame_count / elapsed if elapsed > 0 else 0.0


class PipelineEngine:
    """
    Main processing engine using ObservationSource for frame input.

    Example:
        source = OpenCVSource(OpenCVSourceConfig(device_id=0))
        engine = PipelineEngine(source, ctx, PipelineConfig())
        engine.run()
    """

    def __init__(
        self,
        source: ObservationSource,
        ctx: RuntimeContext,
        config: PipelineConfig,
    ):
        self.source = source
        self.ctx = ctx
        self.config = config
        self.stats = PipelineStats()
        self._running = False
        self._callbacks: List[Callable[[FrameData, TrackingResult], None]] = []

    def add_callback(self, callback: Callable[[FrameData, TrackingResult], None]) -> None:
        """
        Add a callback to be called after each frame is processed.

        Args:
            callback: Function taking (frame_data, result) as arguments.
        """
        self._callbacks.append(callback)

    def run(self) -> None:
        """
        Run the main processing loop until stopped, quit from the window, or
        the source is exhausted.

        Raises:
            RuntimeError: If the source cannot be opened.
        """
        self._running = True
        self.stats = PipelineStats()

        self.source.open()
        self.ctx.dispatcher.start()
        logging.info(f"Pipeline started: source={self.source.source_id}")

        try:
            while self._running:
                frame_data = self.source.read()

                if frame_data is None:
                    if self.source.is_exhausted:
                        logging.info("Source exhausted, stopping")
                        break
                    self.stats.empty_frames += 1
                    time.sleep(self.config.retry_delay)
                    continue

                result = self._process_frame(frame_data)

                for callback in self._callbacks:
                    try:
                        callback(frame_data, result)
                    except Exception as e:
                        logging.warning(f"Callback error: {e}")

                if self.config.display:
                    if not self._handle_display(frame_data, result):
                        break  # User pressed 'q'

                self._handle_periodic_tasks()

        except KeyboardInterrupt:
            logging.info("Pipeline interrupted by user")
        except Exception:
            logging.exception("Pipeline error")
            raise
        finally:
            self._cleanup()

    def stop(self) -> None:
        """Signal the pipeline to stop after the current frame."""
        self._running = False

    def process_detections(self, detections: Sequence[Detection], frame_index: int = 0) -> TrackingResult:
        """
        Suppress, track and dispatch one frame's raw detections.

        Returns the tracking result for this frame.
        """
        filtered = suppress_detections(detections, self.config.iou_threshold)
        result = self.ctx.tracker.update(filtered, frame_index=frame_index)

        if result.changed:
            self.stats.change_count += 1
            self.ctx.update_subjects(result.subjects)
            if self.ctx.dispatcher.dispatch(result):
                self.stats.report_count += 1
            logging.debug(f"[TRACK] frame={frame_index} identities={list(result.identities)}")

        return result

    def _process_frame(self, frame_data: FrameData) -> TrackingResult:
        self.stats.frame_count += 1

        detections = self.ctx.detector.detect(frame_data.frame)
        result = self.process_detections(detections, frame_index=frame_data.frame_index)

        self.ctx.update_frame(fps=self.stats.fps, frame_count=self.stats.frame_count)
        return result

    def _handle_display(self, frame_data: FrameData, result: TrackingResult) -> bool:
        """
        Show the annotated frame.

        Returns False if user pressed 'q' to quit.
        """
        annotated = draw_subjects(frame_data.frame.copy(), result.subjects)
        cv2.imshow(self.config.window_name, annotated)
        key = cv2.waitKey(1) & 0xFF
        return key != ord('q')

    def _handle_periodic_tasks(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            logging.info(
                f"Pipeline stats: frames={self.stats.frame_count}, "
                f"empty_frames={self.stats.empty_frames}, "
                f"changes={self.stats.change_count}, reports={self.stats.report_count}, "
                f"publish={self.ctx.dispatcher.stats()}"
            )
            self.stats.last_stats_log_time = now

    def _cleanup(self) -> None:
        self._running = False

        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

        self.ctx.dispatcher.stop()

        if self.config.display:
            cv2.destroyAllWindows()

        logging.info("Pipeline stopped")


def create_engine_from_config(
    config: Config,
    ctx: RuntimeContext,
    display: bool = False,
    source: Optional[ObservationSource] = None,
) -> PipelineEngine:
    """
    Factory function to create a PipelineEngine from the typed config.

    Args:
        config: Full application config.
        ctx: RuntimeContext with detector, tracker and dispatcher.
        display: Enable display window.
        source: Frame source; defaults to an OpenCVSource for config.camera.
    """
    if source is None:
        source = OpenCVSource(OpenCVSourceConfig.from_camera_config(config.camera, source_id="main-camera"))

    pipeline_config = PipelineConfig(
        iou_threshold=config.suppression.iou_threshold,
        display=display,
    )
    return PipelineEngine(source, ctx, pipeline_config)
