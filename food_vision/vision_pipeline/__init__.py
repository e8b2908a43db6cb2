"""
Vision pipeline package:
- loader: single-flight detector loading with placeholder fallback
- preprocess: photo → normalized detector tensor
- detector: ONNX YOLO-based object detector and the placeholder
- postprocess: raw predictions → food detections
- portions / nutrition: grams, per-item nutrition and totals
- pipeline: high-level orchestrator with the fixed fallback result
"""

from .pipeline import FoodRecognitionPipeline, fallback_result

__all__ = ["FoodRecognitionPipeline", "fallback_result"]
