import os
import argparse
import pandas as pd

from regply.batch.base import summarize_results


def main(args):

	# Parse
	df = pd.read_csv(os.path.join(args.rootdir, 'info.csv'))
	summary = summarize_results(df, max_rms=args.max_rms)

	# Print
	print('Pairs:                      {}'.format(summary['num_pairs']))
	print('Registered:                 {}'.format(summary['num_registered']))
	if summary['mean_rms'] is not None:
		print('Mean RMS:                   {:.6f}'.format(summary['mean_rms']))
		print('Max RMS:                    {:.6f}'.format(summary['max_rms']))
	if args.max_rms is not None:
		print('RMS <= {:<8g}:            {}'.format(args.max_rms, summary['num_accurate']))
	for status, count in sorted(summary['failures'].items(), key=lambda x: x[1], reverse=True):
		print('\t{:<30}: {:>3}'.format(status, count))


if __name__ == '__main__':

	parser = argparse.ArgumentParser()
	parser.add_argument('--rootdir', type=str, help='Root directory', required=True)
	parser.add_argument('--max_rms', type=float, help='RMS threshold for accurate registrations', default=None)
	args = parser.parse_args()
	main(args)
