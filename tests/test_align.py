import math
import torch
import pytest
import numpy as np

from regply.utils.errors import (
	SizeMismatchError,
	EmptySetError,
	DegenerateConfigurationError
)
from regply.utils.points import PointSet
from regply.utils.align import AbsoluteOrientationSolver, compute_absolute_orientation
from regply.utils.residual import compute_rms


EYE = torch.eye(3, dtype=torch.float64)


def random_points(generator, num_points=20):
	return torch.randn(num_points, 3, generator=generator, dtype=torch.float64) * 10


def test_identity(generator):
	points = PointSet.from_coords(random_points(generator))
	transform = AbsoluteOrientationSolver().solve(points, points)
	assert torch.allclose(transform.R, EYE, atol=1e-10)
	assert torch.allclose(transform.T, torch.zeros(3, dtype=torch.float64), atol=1e-9)
	assert transform.s == pytest.approx(1.0)
	assert compute_rms(transform, points, points) == pytest.approx(0.0, abs=1e-9)


def test_exact_recovery(generator, random_rotation):
	R0 = random_rotation(generator)
	T0 = torch.tensor([1.5, -20.0, 3.25], dtype=torch.float64)
	s0 = 2.5
	A = random_points(generator)
	B = s0 * A.mm(R0.T) + T0
	correspondence, reference = PointSet.from_coords(A), PointSet.from_coords(B)

	transform = AbsoluteOrientationSolver().solve(correspondence, reference)
	assert torch.allclose(transform.R, R0, atol=1e-9)
	assert torch.allclose(transform.T, T0, atol=1e-8)
	assert transform.s == pytest.approx(s0)
	assert compute_rms(transform, correspondence, reference) == pytest.approx(0.0, abs=1e-8)


def test_fixed_scale(generator, random_rotation):
	R0 = random_rotation(generator)
	A = random_points(generator)
	B = 3.0 * A.mm(R0.T) + torch.randn(A.shape, generator=generator, dtype=torch.float64) * 0.1
	correspondence, reference = PointSet.from_coords(A), PointSet.from_coords(B)

	solver = AbsoluteOrientationSolver()
	fixed = solver.solve(correspondence, reference, fixed_scale=True)
	estimated = solver.solve(correspondence, reference, fixed_scale=False)
	assert fixed.s == 1.0
	assert estimated.s == pytest.approx(3.0, rel=1e-2)
	assert torch.allclose(fixed.R, R0, atol=1e-2)
	rms_fixed = compute_rms(fixed, correspondence, reference)
	rms_estimated = compute_rms(estimated, correspondence, reference)
	assert rms_fixed >= rms_estimated


def test_rotation_is_proper(generator, random_rotation):
	solver = AbsoluteOrientationSolver()
	for _ in range(25):
		num_points = int(torch.randint(3, 40, (1,), generator=generator))
		A = random_points(generator, num_points)
		B = A.mm(random_rotation(generator).T) + torch.randn(A.shape, generator=generator, dtype=torch.float64)
		transform = solver.solve(PointSet.from_coords(A), PointSet.from_coords(B))
		assert torch.allclose(transform.R.mm(transform.R.T), EYE, atol=1e-10)
		assert torch.linalg.det(transform.R).item() == pytest.approx(1.0)
		assert transform.s > 0


def test_mirrored_reference_yields_rotation(generator):
	A = random_points(generator)
	B = A * torch.tensor([-1.0, 1.0, 1.0], dtype=torch.float64)
	transform = AbsoluteOrientationSolver().solve(PointSet.from_coords(A), PointSet.from_coords(B))
	assert torch.linalg.det(transform.R).item() == pytest.approx(1.0)
	assert torch.allclose(transform.R.mm(transform.R.T), EYE, atol=1e-10)


def test_planar_points(generator, random_rotation):
	A = random_points(generator)
	A[:, 2] = 0
	R0 = random_rotation(generator)
	B = A.mm(R0.T) + 1.0
	transform = AbsoluteOrientationSolver().solve(PointSet.from_coords(A), PointSet.from_coords(B))
	assert torch.allclose(transform.R, R0, atol=1e-9)
	assert torch.linalg.det(transform.R).item() == pytest.approx(1.0)


def test_quarter_turn_about_z():
	reference = PointSet([(0, 0, 0), (1, 0, 0), (0, 1, 0)])
	correspondence = PointSet([(0, 0, 0), (0, 1, 0), (-1, 0, 0)])
	transform = AbsoluteOrientationSolver().solve(correspondence, reference)

	expected = torch.tensor([[0, 1, 0], [-1, 0, 0], [0, 0, 1]], dtype=torch.float64)
	assert torch.allclose(transform.R, expected, atol=1e-12)
	assert torch.allclose(transform.T, torch.zeros(3, dtype=torch.float64), atol=1e-12)
	assert transform.s == pytest.approx(1.0)
	assert compute_rms(transform, correspondence, reference) == pytest.approx(0.0, abs=1e-12)


def test_single_precision_input():
	angle = math.pi / 6
	coords = np.array([[0, 0, 0], [1, 0, 0], [0, 2, 0], [0, 0, 3]], dtype=np.float32)
	R0 = np.array([
		[math.cos(angle), -math.sin(angle), 0],
		[math.sin(angle), math.cos(angle), 0],
		[0, 0, 1]
	])
	rotated = (coords.astype(np.float64) @ R0.T).astype(np.float32)
	correspondence = PointSet.from_arrays(coords[:, 0], coords[:, 1], coords[:, 2])
	reference = PointSet.from_arrays(rotated[:, 0], rotated[:, 1], rotated[:, 2])
	transform = AbsoluteOrientationSolver().solve(correspondence, reference, fixed_scale=True)
	assert transform.R.dtype == torch.float64
	assert np.allclose(transform.R.numpy(), R0, atol=1e-5)


def test_size_mismatch():
	correspondence = PointSet([(0, 0, 0), (1, 0, 0), (0, 1, 0)])
	reference = PointSet([(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)])
	with pytest.raises(SizeMismatchError):
		AbsoluteOrientationSolver().solve(correspondence, reference)
	with pytest.raises(SizeMismatchError):
		compute_absolute_orientation(correspondence.as_tensor(), reference.as_tensor())


def test_empty_sets():
	with pytest.raises(EmptySetError):
		AbsoluteOrientationSolver().solve(PointSet(), PointSet())


@pytest.mark.parametrize('fixed_scale', [False, True])
def test_too_few_points(fixed_scale):
	points = PointSet([(0, 0, 0), (1, 0, 0)])
	with pytest.raises(DegenerateConfigurationError):
		AbsoluteOrientationSolver().solve(points, points, fixed_scale=fixed_scale)


@pytest.mark.parametrize('fixed_scale', [False, True])
def test_collinear_points(fixed_scale):
	correspondence = PointSet([(0, 0, 0), (1, 1, 1), (2, 2, 2), (5, 5, 5)])
	reference = PointSet([(0, 0, 0), (1, 0, 0), (2, 0, 0), (5, 0, 0)])
	with pytest.raises(DegenerateConfigurationError):
		AbsoluteOrientationSolver().solve(correspondence, reference, fixed_scale=fixed_scale)


@pytest.mark.parametrize('fixed_scale', [False, True])
def test_coincident_points(fixed_scale):
	correspondence = PointSet([(1, 2, 3)] * 4)
	reference = PointSet([(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)])
	with pytest.raises(DegenerateConfigurationError, match='coincident'):
		AbsoluteOrientationSolver().solve(correspondence, reference, fixed_scale=fixed_scale)
