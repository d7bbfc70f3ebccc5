import torch
import numpy as np
from collections import namedtuple

from regply.utils.errors import EmptySetError, SizeMismatchError


Point3 = namedtuple('Point3', ['x', 'y', 'z'])


class PointSet():
	"""
	Ordered set of 3D points. The index of a point is its correspondence key
	when two sets are registered against each other.

	Coordinates are stored as Python floats (double precision), so single
	precision input is promoted on insertion. A set is populated once by its
	owner and only read afterwards.
	"""

	def __init__(self, points=None):
		"""
		Args:
			points:
				Optional iterable of (x, y, z) triples. Default to an empty set.
		"""
		self._points = []
		if points is not None:
			for x, y, z in points:
				self.add_point(x, y, z)

	@classmethod
	def from_arrays(cls, xs, ys, zs):
		"""
		Build a point set from three parallel coordinate arrays.

		Args:
			xs, ys, zs:
				[N] X, Y and Z coordinates (float32 or float64).

		Returns:
			A point set of N points.
		"""
		xs = np.asarray(xs, dtype=np.float64).ravel()
		ys = np.asarray(ys, dtype=np.float64).ravel()
		zs = np.asarray(zs, dtype=np.float64).ravel()
		if not (len(xs) == len(ys) == len(zs)):
			raise SizeMismatchError(
				'Coordinate arrays differ in length: {}, {}, {}'.format(len(xs), len(ys), len(zs))
			)
		return cls.from_coords(np.stack([xs, ys, zs], axis=-1))

	@classmethod
	def from_coords(cls, coords):
		"""
		Build a point set from an [N, 3] array-like (list, numpy array or
		CPU tensor).
		"""
		coords = np.asarray(coords, dtype=np.float64)
		if coords.size == 0:
			return cls()
		if coords.ndim != 2 or coords.shape[1] != 3:
			raise ValueError('Expected [N, 3] coordinates, got shape {}'.format(coords.shape))
		point_set = cls()
		point_set._points.extend(map(Point3._make, coords.tolist()))
		return point_set

	def add_point(self, x, y, z):
		self._points.append(Point3(float(x), float(y), float(z)))

	def size(self):
		return len(self._points)

	def __len__(self):
		return len(self._points)

	def __iter__(self):
		return iter(self._points)

	def at(self, i):
		"""
		Return the i-th point. Negative indices are not accepted.
		"""
		if not 0 <= i < len(self._points):
			raise IndexError('Point index {} out of range for {} points'.format(i, len(self._points)))
		return self._points[i]

	def centroid(self):
		"""
		Arithmetic mean of the points, computed independently per axis.

		Returns:
			centroid:
				Point3 of the mean coordinates.
		"""
		if len(self._points) == 0:
			raise EmptySetError('Centroid of an empty point set is undefined')
		return Point3(*self.as_tensor().mean(dim=0).tolist())

	def as_tensor(self):
		"""
		Returns:
			coords:
				[N, 3] float64 tensor holding a copy of the coordinates.
		"""
		return torch.tensor(self._points, dtype=torch.float64).reshape(-1, 3)

	def __repr__(self):
		return 'PointSet(size={})'.format(len(self._points))
