import unittest

import numpy as np

from ffnkit.domain._layer import ILayer
from ffnkit.domain._optimizers import IOptimizer, ISeparableFunction
from ffnkit.domain._output_layer import IOutputLayer
from ffnkit.infrastructure.layers import Dropout, Linear, Sigmoid
from ffnkit.infrastructure.losses import MeanSquaredError, NegativeLogLikelihood
from ffnkit.infrastructure.models import FFN, FFNFunction
from ffnkit.infrastructure.optimizers import SGD, Adam, RMSProp


class TestOptimizerProtocol(unittest.TestCase):
    def test_sgd_conforms_to_ioptimizer(self):
        self.assertIsInstance(SGD(), IOptimizer)

    def test_rmsprop_conforms_to_ioptimizer(self):
        self.assertIsInstance(RMSProp(), IOptimizer)

    def test_adam_conforms_to_ioptimizer(self):
        self.assertIsInstance(Adam(), IOptimizer)


class TestFunctionProtocol(unittest.TestCase):
    def test_ffn_function_conforms_to_iseparable_function(self):
        net = FFN(MeanSquaredError())
        net.add(Linear(2, 1))
        fn = FFNFunction(net, np.zeros((2, 4)), np.zeros((1, 4)))
        self.assertIsInstance(fn, ISeparableFunction)


class TestLayerProtocols(unittest.TestCase):
    def test_layers_conform_to_ilayer(self):
        for layer in (Linear(3, 2), Sigmoid(), Dropout(0.2)):
            self.assertIsInstance(layer, ILayer)

    def test_losses_conform_to_ioutput_layer(self):
        self.assertIsInstance(NegativeLogLikelihood(), IOutputLayer)
        self.assertIsInstance(MeanSquaredError(), IOutputLayer)


if __name__ == "__main__":
    unittest.main()
