"""
Tests for the TFLite backend with the runtime replaced by a fake interpreter.
"""

import sys
import types
from unittest.mock import patch

import numpy as np
import pytest

from inference.tflite_backend import TFLiteBackend, TFLiteConfig


class FakeInterpreter:
    """Stands in for tflite_runtime.interpreter.Interpreter."""

    last = None

    def __init__(self, model_path, num_threads):
        self.model_path = model_path
        self.num_threads = num_threads
        self.inputs = {}
        FakeInterpreter.last = self

    def allocate_tensors(self):
        pass

    def get_input_details(self):
        return [{"index": 0, "shape": np.array([1, 32, 48, 3])}]

    def get_output_details(self):
        return [{"index": 1, "shape": np.array([1, 7, 5])}]

    def set_tensor(self, index, value):
        self.inputs[index] = value

    def invoke(self):
        pass

    def get_tensor(self, index):
        return np.full((1, 7, 5), 0.5, dtype=np.float32)


@pytest.fixture
def fake_runtime():
    interpreter_module = types.ModuleType("tflite_runtime.interpreter")
    interpreter_module.Interpreter = FakeInterpreter
    package = types.ModuleType("tflite_runtime")
    package.interpreter = interpreter_module
    with patch.dict(sys.modules, {"tflite_runtime": package, "tflite_runtime.interpreter": interpreter_module}):
        yield


@pytest.fixture
def model_file(tmp_path):
    path = tmp_path / "model.tflite"
    path.write_bytes(b"\x00")
    return str(path)


def test_missing_runtime_raises_import_error(model_file):
    with patch.dict(sys.modules, {"tflite_runtime": None, "tflite_runtime.interpreter": None}):
        with pytest.raises(ImportError, match="tflite-runtime"):
            TFLiteBackend(TFLiteConfig(model_path=model_file))


def test_missing_model_file(fake_runtime, tmp_path):
    with pytest.raises(FileNotFoundError):
        TFLiteBackend(TFLiteConfig(model_path=str(tmp_path / "missing.tflite")))


def test_output_shape_from_model(fake_runtime, model_file):
    backend = TFLiteBackend(TFLiteConfig(model_path=model_file, num_threads=2))

    assert backend.output_shape == (7, 5)
    assert FakeInterpreter.last.num_threads == 2


def test_infer_resizes_and_normalizes(fake_runtime, model_file):
    backend = TFLiteBackend(TFLiteConfig(model_path=model_file))
    frame = np.full((240, 320, 3), 255, dtype=np.uint8)

    out = backend.infer(frame)

    tensor = FakeInterpreter.last.inputs[0]
    assert tensor.shape == (1, 32, 48, 3)
    assert tensor.dtype == np.float32
    assert float(tensor.max()) == pytest.approx(1.0)
    assert out.shape == (1, 7, 5)
    assert out.dtype == np.float32
