import logging
import argparse

from regply.batch.base import BatchPipeline


def main(args):

	# Pipeline
	pipeline = BatchPipeline(fixed_scale=args.fixed_scale)

	# Evaluate
	pipeline.evaluate(args.rootdir, args.num_cpus, verbose=not args.quiet)


if __name__ == '__main__':
	parser = argparse.ArgumentParser()
	parser.add_argument('--rootdir', type=str, help='Root directory', required=True)
	parser.add_argument('--num_cpus', type=int, help='Number of CPUs', default=1)
	parser.add_argument('--fixed_scale', action='store_true', help='Do not adjust scale')
	parser.add_argument('--quiet', action='store_true', help='Hide progress bars')
	args = parser.parse_args()
	logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
	main(args)
