import torch
import pytest


@pytest.fixture
def generator():
	return torch.Generator().manual_seed(0)


@pytest.fixture
def random_rotation():

	def sample(generator):
		Q, _ = torch.linalg.qr(torch.randn(3, 3, generator=generator, dtype=torch.float64))
		if torch.linalg.det(Q) < 0:
			Q[:, 0] = -Q[:, 0]
		return Q

	return sample


@pytest.fixture
def write_ply():

	def write(filepath, coords, dtype='float'):
		with open(filepath, 'w') as file:
			file.write('ply\nformat ascii 1.0\n')
			file.write('element vertex {}\n'.format(len(coords)))
			for axis in 'xyz':
				file.write('property {} {}\n'.format(dtype, axis))
			file.write('end_header\n')
			for x, y, z in coords:
				file.write('{} {} {}\n'.format(x, y, z))
		return str(filepath)

	return write
