import logging
import unittest

from eigsum import EigSum
from eigsum.nonorthdavidson import NonOrthDavidsonData
from utils import backends, diag_matrix, sym_matrix, ones, rand_data

class TestNonOrthDavidson(unittest.TestCase):

    def setUp(self):
        self.eigsum = [EigSum(backend) for backend in backends]

    def test_diagonal(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            mat_a = es.matrix_operator(diag_matrix(xp, [1.0, 4.0, 9.0]))
            mat_b = es.matrix_operator(diag_matrix(xp, [1.0, 2.0, 3.0]))
            phi = ones(xp, 3)
            res = es.nonorth_davidson(maxiter=3, errgoal=1e-10)(mat_a, mat_b, phi)
            self.assertAlmostEqual(res.value, 1.0, places=8)
            self.assertAlmostEqual(abs(float(phi[0])), 1.0, places=6)
            self.assertLessEqual(res.iterations, 3)

    def test_dense(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            amat, bmat = sym_matrix(xp, 6, seed=1), sym_matrix(xp, 6, seed=2)
            ref, _ = es.nonorth_davidson().solver(amat, bmat)
            for gram_schmidt in [False, True]:
                solver = es.nonorth_davidson(maxiter=6, errgoal=1e-10, gram_schmidt=gram_schmidt)
                phi = rand_data(xp, 6, seed=3)
                res = solver(es.matrix_operator(amat), es.matrix_operator(bmat), phi)
                self.assertAlmostEqual(res.value, float(ref[0]), places=7)
                ovlp = float(xp.sum(phi * (bmat @ phi)))
                self.assertAlmostEqual(ovlp, 1.0, places=6)

    def test_precondition(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            amat, bmat = sym_matrix(xp, 6, seed=1), sym_matrix(xp, 6, seed=2)
            ref, _ = es.nonorth_davidson().solver(amat, bmat)
            solver = es.nonorth_davidson(maxiter=6, errgoal=1e-10, precondition=True)
            res = solver(es.matrix_operator(amat), es.matrix_operator(bmat), rand_data(xp, 6, seed=3))
            self.assertAlmostEqual(res.value, float(ref[0]), places=7)

    def test_overlap_signs(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            amat, bmat = sym_matrix(xp, 8, seed=1), sym_matrix(xp, 8, seed=2)
            mat_a, mat_b = es.matrix_operator(amat), es.matrix_operator(bmat)
            solver = es.nonorth_davidson()
            data = NonOrthDavidsonData(mat_a, mat_b, ones(xp, 8))
            for seed in range(1, 5):
                vec = rand_data(xp, 8, seed=seed) - 0.5
                solver._expand(mat_a, mat_b, vec, data)
                solver._expand(mat_a, mat_b, -vec, data)

            self.assertEqual(data.bmat.dim, 9)
            for k in range(data.bmat.dim):
                self.assertGreaterEqual(float(data.bmat.real[0,k]), 0.0)
                err_a = xp.max(xp.abs(amat @ data.basis[k] - data.aimages[k]))
                err_b = xp.max(xp.abs(bmat @ data.basis[k] - data.bimages[k]))
                self.assertLess(float(err_a), 1e-12)
                self.assertLess(float(err_b), 1e-12)

    def test_single_step(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            mat_a = es.matrix_operator(diag_matrix(xp, [1.0, 4.0, 9.0]))
            mat_b = es.matrix_operator(diag_matrix(xp, [1.0, 2.0, 3.0]))
            res = es.nonorth_davidson(maxiter=1)(mat_a, mat_b, ones(xp, 3))
            self.assertAlmostEqual(res.value, 14.0 / 6.0)
            self.assertEqual(res.iterations, 1)

    def test_logging(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            mat_a = es.matrix_operator(diag_matrix(xp, [1.0, 4.0, 9.0]))
            mat_b = es.matrix_operator(diag_matrix(xp, [1.0, 2.0, 3.0]))
            with self.assertLogs("eigsum.nonorthdavidson", level=logging.INFO):
                es.nonorth_davidson(maxiter=3, debug_level=2)(mat_a, mat_b, ones(xp, 3))

    def test_invalid(self) -> None:
        for es in self.eigsum:
            xp = es.namespace
            mat_a = es.matrix_operator(diag_matrix(xp, [1.0, 4.0, 9.0]))
            mat_b = es.matrix_operator(diag_matrix(xp, [1.0, 2.0, 3.0]))
            solver = es.nonorth_davidson()
            with self.assertRaises(ValueError):
                solver(mat_a, mat_b, xp.zeros(3))
            with self.assertRaises(ValueError):
                solver(mat_a, mat_b, ones(xp, 4))
            with self.assertRaises(ValueError):
                solver(mat_a, es.matrix_operator(diag_matrix(xp, [1.0, 2.0])), ones(xp, 3))
            with self.assertRaises(ValueError):
                solver(mat_a, es.matrix_operator(diag_matrix(xp, [-1.0, -2.0, -3.0])), ones(xp, 3))
            with self.assertRaises(ValueError):
                es.nonorth_davidson(maxiter=0)

if __name__ == '__main__':
    unittest.main()
