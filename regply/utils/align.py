import torch

from regply.utils.errors import (
	SizeMismatchError,
	EmptySetError,
	DegenerateConfigurationError
)
from regply.utils.transform import Transformation


MIN_NUM_POINTS = 3


def compute_absolute_orientation(A, B, fixed_scale=False, eps=1e-10):
	"""
	Compute the similarity transform best aligning point cloud A onto point
	cloud B in the least-squares sense (Umeyama's closed form of the absolute
	orientation problem), i.e. s, R, t minimizing sum_i ||s * R a_i + t - b_i||^2.

	The rotation comes from the SVD of the cross-covariance matrix. Its last
	axis is flipped whenever the naive product V U^T is a reflection, so R is
	always a proper rotation.

	See: https://en.wikipedia.org/wiki/Kabsch_algorithm
	See: Umeyama, "Least-squares estimation of transformation parameters
	between two point patterns", TPAMI 1991.

	Args:
		A:
			[N, 3] Point cloud to align (source, correspondences).
		B:
			[N, 3] Reference point cloud (target).
		fixed_scale:
			Whether to hold the scale at 1. Default to False.
		eps:
			Relative threshold on the second singular value of the
			cross-covariance matrix below which the configuration is
			considered rank deficient. Default to 1e-10.

	Returns:
		R:
			[3, 3] Optimal rotation.
		t:
			[3] Optimal translation.
		s:
			Optimal scale (exactly 1.0 when fixed_scale is set).
	"""
	A = torch.as_tensor(A, dtype=torch.float64)
	B = torch.as_tensor(B, dtype=torch.float64)
	if A.shape[0] != B.shape[0]:
		raise SizeMismatchError(
			'Number of points must be equal in both sets: {} != {}'.format(A.shape[0], B.shape[0])
		)
	if A.shape[0] == 0:
		raise EmptySetError('Cannot register empty point sets')
	if A.shape[0] < MIN_NUM_POINTS:
		raise DegenerateConfigurationError(
			'At least {} point pairs are required, got {}'.format(MIN_NUM_POINTS, A.shape[0])
		)

	# Center
	a_mean = A.mean(dim=0)
	b_mean = B.mean(dim=0)
	A_c = A - a_mean
	B_c = B - b_mean

	# Covariance matrix
	H = A_c.T.mm(B_c)
	U, S, Vh = torch.linalg.svd(H)
	V = Vh.T
	if S[0] == 0 or S[1] <= eps * S[0]:
		raise DegenerateConfigurationError(
			'Point configuration is collinear or coincident (singular values {})'.format(S.tolist())
		)

	# Rotation matrix
	d = torch.sign(torch.linalg.det(V.mm(U.T))).item()
	if d == 0:
		d = 1.0
	D = torch.diag(torch.tensor([1.0, 1.0, d], dtype=torch.float64))
	R = V.mm(D).mm(U.T)

	# Scale
	if fixed_scale:
		s = 1.0
	else:
		# Nonzero since H has rank >= 2
		var_a = (A_c ** 2).sum()
		s = ((B_c * A_c.mm(R.T)).sum() / var_a).item()

	# Translation vector
	t = b_mean - s * R.mv(a_mean)

	return R, t, s


class AbsoluteOrientationSolver():
	"""
	Registers a correspondence point set onto a reference point set of equal
	length, where points are paired by index.
	"""

	def __init__(self, eps=1e-10):
		"""
		Args:
			eps:
				Relative rank threshold passed to compute_absolute_orientation.
				Default to 1e-10.
		"""
		self.eps = eps

	def solve(self, correspondence, reference, fixed_scale=False):
		"""
		Args:
			correspondence:
				PointSet to be moved.
			reference:
				PointSet to align onto.
			fixed_scale:
				Whether to hold the scale at 1. Default to False.

		Returns:
			A Transformation mapping correspondence onto reference.

		Raises:
			SizeMismatchError, EmptySetError, DegenerateConfigurationError
		"""
		if len(correspondence) != len(reference):
			raise SizeMismatchError(
				'Number of points must be equal in both sets: {} != {}'.format(
					len(correspondence), len(reference)
				)
			)
		R, t, s = compute_absolute_orientation(
			correspondence.as_tensor(),
			reference.as_tensor(),
			fixed_scale=fixed_scale,
			eps=self.eps
		)
		return Transformation(R, t, s)
