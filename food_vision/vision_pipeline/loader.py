import asyncio
import logging
import threading
import time
from typing import Callable, Optional

import numpy as np

from food_vision import config
from food_vision.errors import ErrorKind
from food_vision.types import ModelHandle
from .detector import Detector, OnnxDetector, PlaceholderDetector
from .metadata import ClassTable, NutritionTable, load_class_table, load_nutrition_table

logger = logging.getLogger(__name__)

DetectorFactory = Callable[[], Detector]


class ModelLoader:
    """
    Owns the detector handle and the metadata tables.

    ``ensure_loaded`` is single-flight: the first caller schedules the load,
    concurrent callers await the same task and get the same handle. Loading
    never fails; any problem with the real model degrades to the placeholder.
    """

    def __init__(
        self,
        model_path: str = config.YOLO_MODEL_PATH,
        input_size: int = config.MODEL_INPUT_SIZE,
        class_names_path: str = config.CLASS_NAMES_PATH,
        nutrition_table_path: str = config.NUTRITION_TABLE_PATH,
        detector_factory: Optional[DetectorFactory] = None,
        placeholder_anchors: int = config.PLACEHOLDER_ANCHORS,
        placeholder_seed: int = config.PLACEHOLDER_SEED,
    ):
        self.model_path = model_path
        self.input_size = input_size
        self.class_names_path = class_names_path
        self.nutrition_table_path = nutrition_table_path
        self.placeholder_anchors = placeholder_anchors
        self.placeholder_seed = placeholder_seed
        self._detector_factory = detector_factory or self._build_onnx_detector

        self._handle: Optional[ModelHandle] = None
        self._loading: Optional[asyncio.Future] = None
        self._class_table: Optional[ClassTable] = None
        self._nutrition_table: Optional[NutritionTable] = None
        self._tables_lock = threading.Lock()
        self.load_count = 0

    # -------------------------------------------------------------------------
    # Metadata tables
    # -------------------------------------------------------------------------
    @property
    def class_table(self) -> ClassTable:
        with self._tables_lock:
            if self._class_table is None:
                self._class_table = load_class_table(self.class_names_path)
            return self._class_table

    @property
    def nutrition_table(self) -> NutritionTable:
        with self._tables_lock:
            if self._nutrition_table is None:
                self._nutrition_table = load_nutrition_table(self.nutrition_table_path)
            return self._nutrition_table

    # -------------------------------------------------------------------------
    # Handle lifecycle
    # -------------------------------------------------------------------------
    def is_loaded(self) -> bool:
        return self._handle is not None

    async def ensure_loaded(self) -> ModelHandle:
        if self._handle is not None:
            return self._handle

        if self._loading is None:
            logger.info("[LOADER] Model not loaded, starting initialization")
            self._loading = asyncio.ensure_future(self._load())
        else:
            logger.info("[LOADER] Model is already loading, waiting")

        return await asyncio.shield(self._loading)

    async def unload(self) -> None:
        # An in-flight load would otherwise publish its handle after we return.
        if self._loading is not None:
            logger.info("[LOADER] Waiting for in-flight load before unloading")
            try:
                await asyncio.shield(self._loading)
            except Exception as e:
                logger.warning("[LOADER] In-flight load failed during unload: %s", e)

        handle = self._handle
        self._handle = None
        if handle is not None:
            await asyncio.to_thread(handle.detector.close)
        logger.info("[LOADER] Model unloaded")

    async def _load(self) -> ModelHandle:
        try:
            handle = await asyncio.to_thread(self._load_blocking)
            self._handle = handle
            return handle
        finally:
            self._loading = None

    def _load_blocking(self) -> ModelHandle:
        self.load_count += 1
        t0 = time.perf_counter()

        class_table = self.class_table
        _ = self.nutrition_table

        is_placeholder = False
        try:
            detector = self._detector_factory()
            self._warm_up(detector)
        except Exception as e:
            logger.error("[LOADER] Failed to initialize detector: %s", e)
            logger.warning(
                "[LOADER] Falling back to placeholder detector (kind=%s)",
                ErrorKind.LOAD_DEGRADATION.value,
            )
            detector = PlaceholderDetector(
                num_classes=len(class_table),
                num_anchors=self.placeholder_anchors,
                seed=self.placeholder_seed,
            )
            self._warm_up(detector)
            is_placeholder = True

        handle = ModelHandle(
            detector=detector,
            is_placeholder=is_placeholder,
            warmed_up=True,
            input_size=self.input_size,
        )
        logger.info(
            "[LOADER] Model initialization complete in %sms (placeholder=%s)",
            round((time.perf_counter() - t0) * 1000, 2),
            is_placeholder,
        )
        return handle

    def _warm_up(self, detector: Detector) -> None:
        """One inference on a zero tensor to pay lazy initialization up front."""
        dummy = np.zeros((1, self.input_size, self.input_size, 3), dtype=np.float32)
        try:
            detector.predict(dummy)
        finally:
            del dummy
        logger.info("[LOADER] Model warmed up")

    def _build_onnx_detector(self) -> Detector:
        return OnnxDetector(self.model_path, input_size=self.input_size)
