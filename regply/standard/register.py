import sys
import logging
import argparse
import numpy as np

from regply.utils.errors import RegistrationError
from regply.utils.align import AbsoluteOrientationSolver
from regply.utils.residual import compute_rms
from regply.utils.ply import (
	read_point_set,
	read_point_cloud,
	write_point_cloud,
	transform_point_cloud
)


logger = logging.getLogger(__name__)


class ArgumentParser(argparse.ArgumentParser):
	"""
	Argument parser exiting with status 1 on usage errors.
	"""

	def error(self, message):
		self.print_usage(sys.stderr)
		sys.stderr.write('{}: error: {}\n'.format(self.prog, message))
		sys.exit(1)


def create_parser():
	parser = ArgumentParser(
		prog='regply',
		description='Register corresponding control points onto reference points'
	)
	parser.add_argument('-r', '--reference', type=str, help='Reference points', required=True)
	parser.add_argument('-c', '--correspondences', type=str, help='Control points to be aligned', required=True)
	parser.add_argument('-f', '--fixed-scale', action='store_true', help='Do not adjust scale')
	parser.add_argument('-t', '--transform', type=str, help='Optional: cloud to be transformed using resulting matrix')
	parser.add_argument('-o', '--output', type=str, help='Optional: output file name')
	parser.add_argument('-v', '--verbose', action='store_true', help='Print debug information')
	return parser


def main(args):
	"""
	Register the correspondence points onto the reference points, print the
	RMS and the transformation, and optionally transform a cloud.

	Args:
		args:
			Parsed command line arguments.

	Returns:
		Process exit status (0 on success, 1 on failure).
	"""

	# Load
	try:
		reference = read_point_set(args.reference)
		correspondence = read_point_set(args.correspondences)
	except FileNotFoundError as e:
		logger.error('Registration failed: {}'.format(e))
		return 1
	logger.info('Registering {} correspondences onto {} reference points'.format(
		len(correspondence), len(reference)
	))

	# Register
	solver = AbsoluteOrientationSolver()
	try:
		transform = solver.solve(correspondence, reference, fixed_scale=args.fixed_scale)
		rms = compute_rms(transform, correspondence, reference)
	except RegistrationError as e:
		logger.error('Registration failed: {}'.format(e))
		return 1

	# Report
	print('Final RMS: {:g}'.format(rms))
	print(transform.format(fixed_scale=args.fixed_scale))
	print()

	# Transform
	if args.transform or args.output:
		try:
			cloud = read_point_cloud(args.transform or args.correspondences)
		except FileNotFoundError as e:
			logger.error('Transformation failed: {}'.format(e))
			return 1
		cloud = transform_point_cloud(cloud, transform)
		if args.output:
			write_point_cloud(args.output, cloud)
			logger.info('Saved transformed cloud to {}'.format(args.output))
		else:
			sys.stderr.write('result:\n')
			for x, y, z in np.asarray(cloud.points):
				print('{} {} {}'.format(x, y, z))

	return 0


def cli(argv=None):
	args = create_parser().parse_args(argv)
	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.INFO,
		format='%(asctime)s - %(levelname)s - %(message)s'
	)
	sys.exit(main(args))


if __name__ == '__main__':
	cli()
