from __future__ import annotations

from pathlib import Path
import json
import pickle
import tempfile
import unittest

import numpy as np

from ffnkit.infrastructure.layers import (
    Add,
    Dropout,
    Identity,
    Linear,
    LinearNoBias,
    LogSoftMax,
    ReLU,
    Sigmoid,
    Tanh,
)
from ffnkit.infrastructure.losses import CrossEntropyError, NegativeLogLikelihood
from ffnkit.infrastructure.models import ARCHIVE_FORMAT, FFN


def _network() -> FFN:
    np.random.seed(11)
    net = FFN(NegativeLogLikelihood(), initializer="xavier")
    net.add(Linear(4, 6))
    net.add(ReLU())
    net.add(Dropout(0.25))
    net.add(Add(6))
    net.add(Tanh())
    net.add(LinearNoBias(6, 3))
    net.add(LogSoftMax())
    net.reset_parameters()
    return net


class TestFFNArchive(unittest.TestCase):
    def setUp(self):
        self.net = _network()
        self.x = np.random.RandomState(12).randn(4, 5)

    def test_archive_layout(self):
        archive = self.net.to_archive()
        self.assertEqual(archive["format"], ARCHIVE_FORMAT)
        self.assertEqual(archive["initializer"], "xavier")
        self.assertEqual(
            [node["type"] for node in archive["layers"]],
            ["Linear", "ReLU", "Dropout", "Add", "Tanh", "LinearNoBias", "LogSoftMax"],
        )
        self.assertEqual(archive["layers"][2]["config"], {"ratio": 0.25})
        self.assertEqual(archive["output_layer"]["type"], "NegativeLogLikelihood")
        self.assertEqual(archive["parameters"]["shape"], [self.net.parameters.shape[0]])
        # archive must be plain JSON
        json.dumps(archive)

    def test_round_trip_is_bit_exact(self):
        loaded = FFN.from_archive(self.net.to_archive())

        np.testing.assert_array_equal(loaded.parameters, self.net.parameters)
        np.testing.assert_array_equal(loaded.predict(self.x), self.net.predict(self.x))
        self.assertEqual(loaded.initializer, "xavier")
        self.assertIsInstance(loaded.output_layer, NegativeLogLikelihood)
        self.assertEqual(loaded[2].ratio, 0.25)
        self.assertFalse(np.shares_memory(loaded.parameters, self.net.parameters))

    def test_load_into_non_empty_network_replaces_layers(self):
        target = FFN(CrossEntropyError())
        old = target.add(Linear(9, 9))
        target.add(Sigmoid())
        target.reset_parameters()

        target.load_archive(self.net.to_archive())

        self.assertEqual(len(target), 7)
        self.assertIsInstance(target.output_layer, NegativeLogLikelihood)
        self.assertFalse(old.is_bound)
        np.testing.assert_array_equal(target.predict(self.x), self.net.predict(self.x))
        # views point into the loaded vector
        target.parameters[:] = 0.0
        self.assertTrue((target[0].weight == 0.0).all())

    def test_unreset_network_round_trips_without_parameters(self):
        net = FFN()
        net.add(Linear(2, 2))
        archive = net.to_archive()
        self.assertIsNone(archive["parameters"])

        loaded = FFN.from_archive(archive)
        self.assertFalse(loaded.is_reset)
        self.assertEqual(len(loaded), 1)

    def test_eval_mode_is_preserved(self):
        self.net.eval_mode()
        loaded = FFN.from_archive(self.net.to_archive())
        self.assertFalse(loaded.training)
        self.assertFalse(loaded[2].training)

    def test_unknown_layer_type_leaves_target_untouched(self):
        archive = self.net.to_archive()
        archive["layers"][1] = {"type": "___Unknown___", "config": {}}
        target = FFN()
        target.add(Identity())

        with self.assertRaises(ValueError):
            target.load_archive(archive)
        self.assertEqual(len(target), 1)
        self.assertIsInstance(target[0], Identity)

    def test_parameter_length_mismatch_raises(self):
        archive = self.net.to_archive()
        archive["layers"][0]["config"]["out_size"] = 7
        with self.assertRaises(ValueError):
            FFN.from_archive(archive)

    def test_unsupported_format_raises(self):
        archive = self.net.to_archive()
        archive["format"] = "something.else"
        with self.assertRaises(ValueError):
            FFN.from_archive(archive)

    def test_save_and_load_json(self):
        with tempfile.TemporaryDirectory() as td:
            ckpt_path = Path(td) / "nested" / "ffn.json"
            self.net.save_json(ckpt_path)

            payload = json.loads(ckpt_path.read_text(encoding="utf-8"))
            self.assertEqual(payload.get("format"), ARCHIVE_FORMAT)

            loaded = FFN.load_json(ckpt_path)
            target = FFN()
            target.add(Sigmoid())
            target.load_json_into(ckpt_path)

        for other in (loaded, target):
            np.testing.assert_array_equal(other.parameters, self.net.parameters)
            np.testing.assert_array_equal(other.predict(self.x), self.net.predict(self.x))

    def test_pickle_round_trip(self):
        restored = pickle.loads(pickle.dumps(self.net))
        np.testing.assert_array_equal(restored.parameters, self.net.parameters)
        np.testing.assert_array_equal(restored.predict(self.x), self.net.predict(self.x))
        self.assertEqual(len(restored), len(self.net))


if __name__ == "__main__":
    unittest.main()
