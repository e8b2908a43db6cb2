import json
import os

import onnx
from onnx import checker
from ultralytics import YOLO

from food_vision import config

MODELS = [
    {
        "source": "models/yolov8l-oiv7.pt",
        "target": config.YOLO_MODEL_PATH,
        "imgsz": config.MODEL_INPUT_SIZE,
    },
]


def export_class_names(model, target):
    names = {str(class_id): name for class_id, name in sorted(model.names.items())}
    with open(target, "w", encoding="utf-8") as f:
        json.dump(names, f, ensure_ascii=False, indent=2)
    print(f"✔ Saved {len(names)} class names to {target}")


def export_model(source, target, imgsz, class_names_target=None):
    print(f"\n🚀 Exporting {source} → {target}")
    if not os.path.exists(source):
        # Ultralytics downloads released weights by name
        print(f"⚠ {source} not found locally, fetching {os.path.basename(source)}")
        source = os.path.basename(source)

    model = YOLO(source)
    generated = model.export(format="onnx", imgsz=imgsz)

    if not generated or not os.path.exists(generated):
        print(f"❌ ONNX export file not found: {generated}")
        return

    os.makedirs(os.path.dirname(target), exist_ok=True)
    os.replace(generated, target)
    print(f"✔ Saved as {target}")

    print(f"🔍 Checking ONNX {target} ...")
    m = onnx.load(target)
    checker.check_model(m)
    print(f"✔ ONNX validated: {target}")

    if class_names_target:
        export_class_names(model, class_names_target)


if __name__ == "__main__":
    for m in MODELS:
        export_model(m["source"], m["target"], m["imgsz"], os.getenv("EXPORT_CLASS_NAMES_PATH"))
