import torch

from regply.utils.errors import SizeMismatchError, EmptySetError


def compute_rms(transform, correspondence, reference):
	"""
	Root-mean-square distance between the transformed correspondence points
	and their reference points. Recomputed on every call.

	Args:
		transform:
			Transformation mapping correspondence onto reference.
		correspondence:
			[N] PointSet to be moved.
		reference:
			[N] Reference PointSet.

	Returns:
		rms:
			Non-negative float.
	"""
	if len(correspondence) != len(reference):
		raise SizeMismatchError(
			'Number of points must be equal in both sets: {} != {}'.format(
				len(correspondence), len(reference)
			)
		)
	if len(reference) == 0:
		raise EmptySetError('RMS of empty point sets is undefined')

	aligned = transform.apply(correspondence.as_tensor())
	return torch.sqrt(((aligned - reference.as_tensor()) ** 2).sum(dim=1).mean()).item()
