import torch


class Transformation():
	"""
	Similarity transform p -> s * R p + T mapping the correspondence space
	onto the reference space.
	"""

	def __init__(self, R, T, s=1.0):
		"""
		Args:
			R:
				[3, 3] proper rotation matrix.
			T:
				[3] translation vector.
			s:
				Uniform scale. Default to 1.
		"""
		self._R = torch.as_tensor(R, dtype=torch.float64).reshape(3, 3).clone()
		self._T = torch.as_tensor(T, dtype=torch.float64).reshape(3).clone()
		self._s = float(s)

	@property
	def R(self):
		return self._R.clone()

	@property
	def T(self):
		return self._T.clone()

	@property
	def s(self):
		return self._s

	def matrix(self):
		"""
		Composed homogeneous view of the transform.

		Returns:
			M:
				[4, 4] matrix whose upper left block is s * R, whose last
				column holds T and whose bottom row is (0, 0, 0, 1).
		"""
		M = torch.eye(4, dtype=torch.float64)
		M[:3, :3] = self._s * self._R
		M[:3, 3] = self._T
		return M

	def apply(self, coords):
		"""
		Transform a batch of points.

		Args:
			coords:
				[N, 3] coordinates.

		Returns:
			[N, 3] float64 tensor of transformed coordinates.
		"""
		coords = torch.as_tensor(coords, dtype=torch.float64).reshape(-1, 3)
		return self._s * coords.mm(self._R.T) + self._T[None, :]

	def inverse(self):
		"""
		Transform mapping the reference space back onto the correspondence
		space, i.e. x -> R^T (x - T) / s.
		"""
		if self._s == 0:
			raise ZeroDivisionError('Transformation with zero scale is not invertible')
		R_inv = self._R.T
		return Transformation(R_inv, -R_inv.mv(self._T) / self._s, 1.0 / self._s)

	def format(self, fixed_scale=False):
		"""
		Render the transform as text: the 4x4 homogeneous matrix between two
		rulers, followed by the scale when it was estimated.

		Args:
			fixed_scale:
				Whether scale was held fixed (omits the scale line).

		Returns:
			Report as a multi-line string, without trailing newline.
		"""
		M = self.matrix()
		lines = ['-------------------', 'Transformation matrix']
		for i in range(3):
			lines.append(' '.join('{:f}'.format(v) for v in M[i].tolist()))
		lines.append('0.0 0.0 0.0 1.0')
		lines.append('-------------------')
		if not fixed_scale:
			lines.append('Scale: {:f} (already integrated in above matrix) '.format(self._s))
		return '\n'.join(lines)

	def __repr__(self):
		return 'Transformation(R={}, T={}, s={})'.format(self._R.tolist(), self._T.tolist(), self._s)
