import logging
import unittest
from unittest import mock

from eigsum import EigSum
from eigsum.typing import DavidsonState, LanczosPrecond
from utils import backends, diag_matrix, sym_matrix, herm_matrix, ones, rand_data, orthogonality

class TestDavidson(unittest.TestCase):

    def setUp(self):
        self.eigsum = [EigSum(backend) for backend in backends]

    def test_diagonal(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            op = es.matrix_operator(diag_matrix(xp, [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]))
            solver = es.davidson(maxiter=5, errgoal=1e-10, seed=0)
            phi = ones(xp, 6)
            res = solver.single(op, phi)
            self.assertAlmostEqual(res.values[0], 1.0, places=8)
            self.assertAlmostEqual(abs(float(phi[0])), 1.0, places=6)
            self.assertAlmostEqual(float(xp.sum(phi**2)), 1.0, places=10)
            self.assertIs(res.state, DavidsonState.CONVERGED)
            self.assertLess(orthogonality(xp, res.basis), 1e-8)

    def test_several_hermitian(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            op = es.matrix_operator(diag_matrix(xp, [5.0, 3.0, 1.0, 4.0, 2.0]))
            solver = es.davidson(maxiter=4, errgoal=1e-10, seed=0)
            phi = [ones(xp, 5), rand_data(xp, 5, seed=1), rand_data(xp, 5, seed=2)]
            res = solver(op, phi)
            for val, ref in zip(res.values, [1.0, 2.0, 3.0]):
                self.assertAlmostEqual(val, ref, places=8)
            self.assertLess(orthogonality(xp, phi), 1e-8)
            self.assertEqual(len(res.arrays), 3)

    def test_several_magnitude(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            op = es.matrix_operator(diag_matrix(xp, [5.0, 3.0, 1.0, 4.0, 2.0]))
            solver = es.davidson(maxiter=4, errgoal=1e-10, hermitian=False, seed=0)
            phi = [ones(xp, 5), rand_data(xp, 5, seed=1), rand_data(xp, 5, seed=2)]
            res = solver(op, phi)
            for val, ref in zip(res.values, [5.0, 4.0, 3.0]):
                self.assertAlmostEqual(val, ref, places=8)

    def test_dense(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            mat = sym_matrix(xp, 12)
            ref, _ = xp.linalg.eigh(mat)
            solver = es.davidson(maxiter=11, errgoal=1e-10, seed=0)
            phi = [rand_data(xp, 12, seed=3), rand_data(xp, 12, seed=4)]
            res = solver(es.matrix_operator(mat), phi)
            self.assertAlmostEqual(res.values[0], float(ref[0]), places=8)
            self.assertAlmostEqual(res.values[1], float(ref[1]), places=8)
            self.assertLess(orthogonality(xp, res.basis), 1e-8)
            for vec, val in zip(phi, res.values):
                err = xp.max(xp.abs(mat @ vec - val * vec))
                self.assertLess(float(err), 1e-6)

    def test_complex_hermitian(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            mat = herm_matrix(xp, 6)
            ref, _ = xp.linalg.eigh(mat)
            solver = es.davidson(maxiter=5, errgoal=1e-10, seed=0)
            phi = xp.ones(6, dtype=xp.complex128)
            res = solver.single(es.matrix_operator(mat), phi)
            self.assertAlmostEqual(res.values[0], float(ref[0]), places=8)
            self.assertIsInstance(res.values[0], float)
            self.assertAlmostEqual(float(xp.sum(xp.abs(phi)**2)), 1.0, places=10)
            self.assertLess(orthogonality(xp, res.basis), 1e-8)

    def test_einsum(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            left = rand_data(xp, 3, 2, 3, seed=1)
            left = left + xp.permute_dims(left, (2, 1, 0))
            mpo = rand_data(xp, 2, 2, 2, 2, seed=2)
            mpo = mpo + xp.permute_dims(mpo, (0, 2, 1, 3))
            right = rand_data(xp, 3, 2, 3, seed=3)
            right = right + xp.permute_dims(right, (2, 1, 0))
            op = es.einsum_operator("axA,xsSy,byB,ASB->asb", left, mpo, right)

            eye = xp.eye(18)
            cols = [xp.reshape(op.product(xp.reshape(eye[:,i], (3, 2, 3))), (-1,)) for i in range(18)]
            dense = xp.stack(cols, axis=1)
            ref, _ = xp.linalg.eigh(dense)

            solver = es.davidson(maxiter=17, errgoal=1e-10, seed=0)
            phi = rand_data(xp, 3, 2, 3, seed=5)
            res = solver.single(op, phi)
            self.assertAlmostEqual(res.values[0], float(ref[0]), places=7)
            self.assertEqual(phi.shape, (3, 2, 3))

    def test_exact_guess(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            op = es.matrix_operator(diag_matrix(xp, [1.0, 2.0, 3.0]))
            phi = xp.asarray([0.0, 2.0, 0.0])
            res = es.davidson(seed=0).single(op, phi)
            self.assertAlmostEqual(res.values[0], 2.0)
            self.assertAlmostEqual(float(phi[1]), 1.0)

    def test_large_dense(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            mat = sym_matrix(xp, 60)
            ref, _ = xp.linalg.eigh(mat)
            solver = es.davidson(maxiter=30, errgoal=1e-10, seed=0)
            phi = ones(xp, 60)
            res = solver.single(es.matrix_operator(mat), phi)
            self.assertLess(orthogonality(xp, res.basis), 1e-8)
            self.assertGreaterEqual(res.values[0], float(ref[0]) - solver.errgoal)
            self.assertAlmostEqual(float(xp.sum(phi**2)), 1.0, places=10)

    def test_exact_guess_several(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            op = es.matrix_operator(diag_matrix(xp, [1.0, 2.0, 3.0]))
            phi = [xp.asarray([1.0, 0.0, 0.0]), rand_data(xp, 3, seed=1), rand_data(xp, 3, seed=2)]
            res = es.davidson(maxiter=2, errgoal=1e-10, seed=0)(op, phi)
            for val, ref in zip(res.values, [1.0, 2.0, 3.0]):
                self.assertAlmostEqual(val, ref, places=8)
            self.assertEqual(len(res.basis), 3)
            self.assertLess(orthogonality(xp, res.basis), 1e-8)
            self.assertLess(orthogonality(xp, phi), 1e-8)

    def test_exhausted(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            op = es.matrix_operator(diag_matrix(xp, [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]))
            phi = ones(xp, 6)
            # the diagonal preconditioner maps the residual onto -phi, so every
            # replacement vector has to be independent of the basis
            with mock.patch("eigsum.davidson.randomize", side_effect=lambda vec, rng: vec * 1.0):
                with self.assertLogs("eigsum.davidson", level=logging.WARNING):
                    res = es.davidson(maxiter=5, seed=0).single(op, phi)
            self.assertIs(res.state, DavidsonState.EXHAUSTED)
            self.assertAlmostEqual(res.values[0], 3.5)
            self.assertEqual(res.iterations, 0)
            self.assertEqual(len(res.basis), 1)
            self.assertAlmostEqual(float(xp.sum(phi**2)), 1.0, places=10)

    def test_iteration_budget(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            op = es.matrix_operator(diag_matrix(xp, [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]))
            res = es.davidson(maxiter=1, seed=0).single(op, ones(xp, 6))
            self.assertIs(res.state, DavidsonState.MAXITER)
            self.assertEqual(res.iterations, 1)
            self.assertEqual(len(res.residuals), 2)

    def test_idempotent(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            op = es.matrix_operator(sym_matrix(xp, 8))
            solver = es.davidson(maxiter=7, errgoal=1e-10, seed=0)
            phi = rand_data(xp, 8, seed=6)
            first = solver.single(op, phi).values[0]
            second = solver.single(op, phi).values[0]
            self.assertAlmostEqual(float(xp.sum(phi**2)), 1.0, places=10)
            self.assertAlmostEqual(first, second, places=8)

    def test_dimension_one(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            op = es.matrix_operator(xp.asarray([[3.0]]))
            phi = xp.asarray([-2.0])
            res = es.davidson(maxiter=10).single(op, phi)
            self.assertAlmostEqual(res.values[0], 3.0)
            self.assertEqual(res.iterations, 0)
            self.assertAlmostEqual(abs(float(phi[0])), 1.0)

    def test_more_pairs_than_subspace(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            op = es.matrix_operator(diag_matrix(xp, [1.0, 2.0, 3.0, 4.0]))
            phi = [ones(xp, 4), rand_data(xp, 4, seed=1), rand_data(xp, 4, seed=2)]
            with self.assertLogs("eigsum", level=logging.WARNING):
                res = es.davidson(maxiter=1, seed=0)(op, phi)
            self.assertEqual(len(res.values), 3)
            self.assertNotEqual(res.values[2], res.values[2])

    def test_lanczos_preconditioner(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            mat = sym_matrix(xp, 6)
            ref, _ = xp.linalg.eigh(mat)
            solver = es.davidson(maxiter=5, errgoal=1e-10, preconditioner=LanczosPrecond, seed=0)
            res = solver.single(es.matrix_operator(mat), ones(xp, 6))
            self.assertAlmostEqual(res.values[0], float(ref[0]), places=8)

    def test_without_diagonal(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            mat = sym_matrix(xp, 6)
            ref, _ = xp.linalg.eigh(mat)
            solver = es.davidson(maxiter=5, errgoal=1e-10, seed=0)
            res = solver.single(es.matrix_operator(mat, use_diag=False), ones(xp, 6))
            self.assertAlmostEqual(res.values[0], float(ref[0]), places=8)

    def test_logging(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            op = es.matrix_operator(sym_matrix(xp, 5))
            with self.assertLogs("eigsum.davidson", level=logging.INFO) as logs:
                es.davidson(maxiter=4, debug_level=2, seed=0).single(op, ones(xp, 5))
            self.assertTrue(any(" q " in line for line in logs.output))

    def test_invalid(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            op = es.matrix_operator(diag_matrix(xp, [1.0, 2.0, 3.0]))
            solver = es.davidson()
            with self.assertRaises(ValueError):
                solver(op, [])
            with self.assertRaises(ValueError):
                solver(op, [ones(xp, 3), ones(xp, 4)])
            with self.assertRaises(ValueError):
                solver(op, [xp.zeros(3)])
            with self.assertRaises(ValueError):
                solver(op, [ones(xp, 4)])
            with self.assertRaises(ValueError):
                es.davidson(npass=0)
            with self.assertRaises(ValueError):
                es.davidson(errgoal=-1.0)
            with self.assertRaises(ValueError):
                solver.maxiter = -1

if __name__ == '__main__':
    unittest.main()
