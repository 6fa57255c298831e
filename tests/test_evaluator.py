# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Tests that synthesized operations compute what they claim, checked against
# the dense Cayley-table product on random inputs.

import math
import unittest

import torch

from compiler.synthesis import synthesize
from core.descriptor import load_configuration
from ir.evaluator import Evaluator, from_dense, random_value, to_dense
from ir.nodes import Integer, MultiVector, Operation, SimdVector

DESCRIPTOR = "G3:1,1,1;Rotor:1,e12,e13,e23;Vector:e1,e2,e3"


class TestEvaluator(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.configuration = load_configuration(DESCRIPTOR)
        cls.algebra = cls.configuration.algebra
        cls.synthesizer, nodes = synthesize(cls.algebra, cls.configuration.registry)
        cls.evaluator = Evaluator(nodes)
        cls.classes = {c.class_name: c for c in cls.configuration.registry}
        cls.rotor = cls.classes["Rotor"]
        cls.vector = cls.classes["Vector"]
        cls.scalar = cls.classes["Scalar"]

    def setUp(self):
        self.generator = torch.Generator().manual_seed(7)

    def random(self, multi_vector_class, batch=(5,)):
        return random_value(multi_vector_class, batch, generator=self.generator)

    def dense(self, multi_vector_class, value):
        return to_dense(multi_vector_class, value, self.algebra.basis_size())

    def assertDenseClose(self, multi_vector_class, value, expected):
        self.assertTrue(torch.allclose(self.dense(multi_vector_class, value), expected, atol=1e-9))

    def run_op(self, operation, classes, *arguments, result=None):
        types = [c if isinstance(c, (Integer, SimdVector)) else MultiVector(c) for c in classes]
        result_type = None if result is None else MultiVector(result)
        return self.evaluator(operation, types, *arguments, result_type=result_type)

    # ------------------------------------------------------------------
    # Layout helpers
    # ------------------------------------------------------------------

    def test_dense_round_trip_keeps_signs(self):
        value = self.random(self.rotor)
        dense = self.dense(self.rotor, value)
        # the class lists e13, the raw blade is e13 as well
        self.assertTrue(torch.allclose(dense[..., 5], value[0][..., 2]))
        back = from_dense(self.rotor, dense)
        self.assertTrue(torch.allclose(back[0], value[0]))

    # ------------------------------------------------------------------
    # Basic operations
    # ------------------------------------------------------------------

    def test_geometric_product(self):
        for class_a, class_b in [(self.rotor, self.vector), (self.vector, self.vector),
                                 (self.rotor, self.rotor), (self.vector, self.rotor)]:
            a, b = self.random(class_a), self.random(class_b)
            definition = self.synthesizer.lookup(Operation.GEOMETRIC_PRODUCT, class_a, class_b)
            result = self.evaluator.call(definition, a, b)
            expected = self.algebra.geometric_product(self.dense(class_a, a), self.dense(class_b, b))
            self.assertDenseClose(definition.result.data_type.multi_vector_class, result, expected)

    def test_reversal(self):
        a = self.random(self.rotor)
        result = self.run_op(Operation.REVERSAL, [self.rotor], a)
        dense = self.dense(self.rotor, a)
        dense[..., 3] = -dense[..., 3]
        dense[..., 5] = -dense[..., 5]
        dense[..., 6] = -dense[..., 6]
        self.assertDenseClose(self.rotor, result, dense)

    def test_add_and_sub(self):
        a, b = self.random(self.scalar), self.random(self.rotor)
        added = self.run_op(Operation.ADD, [self.scalar, self.rotor], a, b)
        self.assertDenseClose(self.rotor, added, self.dense(self.scalar, a) + self.dense(self.rotor, b))
        subtracted = self.run_op(Operation.SUB, [self.rotor, self.rotor], b, b)
        self.assertTrue(torch.allclose(subtracted[0], torch.zeros_like(b[0])))

    def test_conversion(self):
        odd = self.classes["RotorVectorProduct"]
        a = self.random(odd)
        result = self.run_op(Operation.INTO, [odd], a, result=self.vector)
        expected = self.dense(odd, a)
        expected[..., 7] = 0
        self.assertDenseClose(self.vector, result, expected)

    def test_one_and_zero(self):
        one = self.run_op(Operation.ONE, [], result=self.rotor)
        zero = self.run_op(Operation.ZERO, [], result=self.rotor)
        self.assertEqual(one[0].tolist(), [1.0, 0.0, 0.0, 0.0])
        self.assertEqual(zero[0].tolist(), [0.0, 0.0, 0.0, 0.0])

    # ------------------------------------------------------------------
    # Derived operations
    # ------------------------------------------------------------------

    def test_magnitude(self):
        a = self.random(self.vector)
        squared = self.run_op(Operation.SQUARED_MAGNITUDE, [self.vector], a)
        magnitude = self.run_op(Operation.MAGNITUDE, [self.vector], a)
        norm = a[0].pow(2).sum(dim=-1, keepdim=True)
        self.assertTrue(torch.allclose(squared[0], norm))
        self.assertTrue(torch.allclose(magnitude[0], norm.sqrt()))

    def test_inverse(self):
        a = self.random(self.rotor)
        inverse = self.run_op(Operation.INVERSE, [self.rotor], a)
        product = self.run_op(Operation.GEOMETRIC_PRODUCT, [self.rotor, self.rotor], a, inverse)
        one = torch.tensor([1.0, 0.0, 0.0, 0.0], dtype=torch.float64).expand_as(product[0])
        self.assertTrue(torch.allclose(product[0], one, atol=1e-9))

    def test_signum_has_unit_magnitude(self):
        a = self.random(self.vector)
        signum = self.run_op(Operation.SIGNUM, [self.vector], a)
        magnitude = self.run_op(Operation.MAGNITUDE, [self.vector], signum)
        self.assertTrue(torch.allclose(magnitude[0], torch.ones_like(magnitude[0])))

    def test_scale(self):
        a = self.random(self.rotor)
        factor = torch.full((5, 1), 2.5, dtype=torch.float64)
        result = self.run_op(Operation.SCALE, [self.rotor, SimdVector(1)], a, factor)
        self.assertTrue(torch.allclose(result[0], a[0] * 2.5))

    def test_powi(self):
        a = self.random(self.rotor)
        dense = self.dense(self.rotor, a)
        cube = self.algebra.geometric_product(self.algebra.geometric_product(dense, dense), dense)
        result = self.run_op(Operation.POWI, [self.rotor, Integer()], a, 3)
        self.assertDenseClose(self.rotor, result, cube)

        identity = self.run_op(Operation.POWI, [self.rotor, Integer()], a, 0)
        self.assertEqual(identity[0].tolist(), [1.0, 0.0, 0.0, 0.0])

        inverse_squared = self.run_op(Operation.POWI, [self.rotor, Integer()], a, -2)
        square = self.run_op(Operation.POWI, [self.rotor, Integer()], a, 2)
        product = self.run_op(Operation.GEOMETRIC_PRODUCT, [self.rotor, self.rotor],
                              square, inverse_squared)
        one = torch.tensor([1.0, 0.0, 0.0, 0.0], dtype=torch.float64).expand_as(product[0])
        self.assertTrue(torch.allclose(product[0], one, atol=1e-9))

    def test_geometric_quotient(self):
        a, b = self.random(self.vector), self.random(self.rotor)
        quotient = self.run_op(Operation.GEOMETRIC_QUOTIENT, [self.vector, self.rotor], a, b)
        odd = self.classes["RotorVectorProduct"]
        back = self.run_op(Operation.GEOMETRIC_PRODUCT, [odd, self.rotor], quotient, b)
        expected = self.dense(self.vector, a)
        self.assertDenseClose(odd, back, expected)

    def test_transformation_rotates_vector(self):
        half = 1.0 / math.sqrt(2.0)
        rotor = (torch.tensor([half, -half, 0.0, 0.0], dtype=torch.float64),)
        e1 = (torch.tensor([1.0, 0.0, 0.0], dtype=torch.float64),)
        result = self.run_op(Operation.TRANSFORMATION, [self.rotor, self.vector], rotor, e1)
        self.assertTrue(torch.allclose(result[0], torch.tensor([0.0, 1.0, 0.0], dtype=torch.float64)))

    def test_transformation_matches_dense_sandwich(self):
        a, b = self.random(self.rotor), self.random(self.vector)
        result = self.run_op(Operation.TRANSFORMATION, [self.rotor, self.vector], a, b)
        dense_a = self.dense(self.rotor, a)
        reversed_a = self.dense(self.rotor, self.run_op(Operation.REVERSAL, [self.rotor], a))
        sandwich = self.algebra.geometric_product(
            self.algebra.geometric_product(dense_a, self.dense(self.vector, b)), reversed_a,
        )
        sandwich[..., 7] = 0
        self.assertDenseClose(self.vector, result, sandwich)


if __name__ == '__main__':
    unittest.main()
