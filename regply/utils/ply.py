import os
import logging
import numpy as np
import open3d as o3d

from regply.utils.points import PointSet


logger = logging.getLogger(__name__)


def read_point_cloud(filepath):
	"""
	Load a point cloud (vertices plus optional colors and normals) from a
	PLY file.

	Args:
		filepath:
			Path to PLY file. Vertex coordinates may be stored as float or
			double.

	Returns:
		An open3d point cloud.
	"""
	if not os.path.exists(filepath):
		raise FileNotFoundError('Missing point cloud file: {}'.format(filepath))
	cloud = o3d.io.read_point_cloud(filepath, format='ply')
	logger.debug('Loaded {} points from {}'.format(len(cloud.points), filepath))
	return cloud


def write_point_cloud(filepath, cloud, write_ascii=False):
	"""
	Save a point cloud to a PLY file (binary unless write_ascii is set).
	"""
	if not o3d.io.write_point_cloud(filepath, cloud, write_ascii=write_ascii):
		raise IOError('Failed to write point cloud: {}'.format(filepath))
	logger.debug('Saved {} points to {}'.format(len(cloud.points), filepath))


def read_point_set(filepath):
	"""
	Load the vertex coordinates of a PLY file as a point set, in file order.
	"""
	cloud = read_point_cloud(filepath)
	return PointSet.from_coords(np.asarray(cloud.points))


def transform_point_cloud(cloud, transform):
	"""
	Apply a transformation to a copy of a point cloud. Normals, if any, are
	rotated along.

	Args:
		cloud:
			open3d point cloud.
		transform:
			Transformation to apply.

	Returns:
		Transformed open3d point cloud.
	"""
	transformed = o3d.geometry.PointCloud(cloud)
	transformed.transform(transform.matrix().numpy())
	return transformed
