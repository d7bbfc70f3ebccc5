import os
import glob
import shutil
import logging
import pandas as pd
from tqdm import tqdm

from regply.utils.errors import RegistrationError
from regply.utils.align import AbsoluteOrientationSolver
from regply.utils.residual import compute_rms
from regply.utils.ply import read_point_set
from regply.utils.process import run_parallel


logger = logging.getLogger(__name__)

COLUMNS = ['name', 'num_points', 'status', 'rms', 'scale', 'tx', 'ty', 'tz']


def register_pairs(i, tasks, params):
	"""
	Register a bin of (name, reference filepath, correspondences filepath)
	tasks and write one result row per task to [output_dir]/[i].csv.
	"""

	# Set up output file
	scores_filepath = os.path.join(params['output_dir'], f'{i}.csv')
	with open(scores_filepath, 'w') as file:
		file.write(','.join(COLUMNS) + '\n')

	# Iterate
	solver = AbsoluteOrientationSolver(eps=params['eps'])
	for name, reference_filepath, correspondences_filepath in tqdm(
		tasks, desc=f'Registering ({i})', disable=not params['verbose']
	):
		num_points = ''
		try:
			reference = read_point_set(reference_filepath)
			correspondence = read_point_set(correspondences_filepath)
			num_points = len(correspondence)
			transform = solver.solve(correspondence, reference, fixed_scale=params['fixed_scale'])
			rms = compute_rms(transform, correspondence, reference)
		except (RegistrationError, OSError, ValueError) as e:
			logger.warning('Failed to register {}: {}'.format(name, e))
			row = '{},{},{},,,,,\n'.format(name, num_points, type(e).__name__)
		else:
			tx, ty, tz = transform.T.tolist()
			row = '{},{},ok,{:.6f},{:.6f},{:.6f},{:.6f},{:.6f}\n'.format(
				name, num_points, rms, transform.s, tx, ty, tz
			)

		# Save
		with open(scores_filepath, 'a') as file:
			file.write(row)


class BatchPipeline():
	"""
	Batch registration pipeline.

	Registers every correspondence file in a directory onto the reference
	file of the same name and collects RMS, scale and translation into a
	single table.
	"""

	def __init__(self, fixed_scale=False, eps=1e-10):
		"""
		Args:
			fixed_scale:
				Whether to hold the scale at 1. Default to False.
			eps:
				Relative rank threshold for degenerate configurations.
				Default to 1e-10.
		"""
		self.fixed_scale = fixed_scale
		self.eps = eps

	def evaluate(self, rootdir, num_processes=1, verbose=True):
		"""
		Register all pairs under the root directory. Outputs are stored in a
		file named 'info.csv' under the root directory, one line per pair.

		Args:
			rootdir:
				Root directory consist of
					-	a subdirectory named 'reference', where each file
						contains reference points in the PLY format
					-	a subdirectory named 'correspondences', where each
						corresponding file (same filename as in the 'reference'
						subdirectory) contains the points to be aligned
			num_processes:
				Number of processes/CPUs. Default to 1.
			verbose:
				Whether to print detailed progress information. Default to True.

		Returns:
			DataFrame of the saved results, sorted by name.
		"""

		# Check for input files/directories
		reference_dir = os.path.join(rootdir, 'reference')
		correspondences_dir = os.path.join(rootdir, 'correspondences')
		assert os.path.exists(reference_dir), 'Missing input reference directory'
		assert os.path.exists(correspondences_dir), 'Missing input correspondences directory'
		info_filepath = os.path.join(rootdir, 'info.csv')
		assert not os.path.exists(info_filepath), 'Output info filepath existed'

		# Create tasks
		tasks = self._create_tasks(reference_dir, correspondences_dir)
		logger.info('Registering {} pairs with {} processes'.format(len(tasks), num_processes))

		# Process
		scores_dir = os.path.join(rootdir, 'scores')
		assert not os.path.exists(scores_dir), 'Output scores directory existed'
		os.mkdir(scores_dir)
		try:
			run_parallel(
				num_processes=num_processes,
				fn=register_pairs,
				tasks=tasks,
				params={
					'output_dir': scores_dir,
					'fixed_scale': self.fixed_scale,
					'eps': self.eps,
					'verbose': verbose
				}
			)
			df = self._aggregate(scores_dir)
		finally:
			shutil.rmtree(scores_dir)

		# Save
		df.to_csv(info_filepath, index=False)
		return df

	def _create_tasks(self, reference_dir, correspondences_dir):
		tasks = []
		for reference_filepath in sorted(glob.glob(os.path.join(reference_dir, '*.ply'))):
			filename = os.path.basename(reference_filepath)
			correspondences_filepath = os.path.join(correspondences_dir, filename)
			if not os.path.exists(correspondences_filepath):
				logger.warning('Missing correspondences for {}, skipped'.format(filename))
				continue
			tasks.append((os.path.splitext(filename)[0], reference_filepath, correspondences_filepath))
		return tasks

	def _aggregate(self, scores_dir):
		filepaths = glob.glob(os.path.join(scores_dir, '*.csv'))
		if len(filepaths) == 0:
			return pd.DataFrame(columns=COLUMNS)
		df = pd.concat([pd.read_csv(filepath, dtype={'name': str}) for filepath in filepaths])
		return df.sort_values('name').reset_index(drop=True)


def summarize_results(df, max_rms=None):
	"""
	Summarize a batch result table.

	Args:
		df:
			DataFrame with the columns written by BatchPipeline.
		max_rms:
			Optional RMS threshold for counting accurate registrations.

	Returns:
		A dictionary of summary statistics.
	"""
	df_ok = df[df['status'] == 'ok']
	summary = {
		'num_pairs': len(df),
		'num_registered': len(df_ok),
		'failures': df[df['status'] != 'ok']['status'].value_counts().to_dict(),
		'mean_rms': df_ok['rms'].mean() if len(df_ok) > 0 else None,
		'max_rms': df_ok['rms'].max() if len(df_ok) > 0 else None
	}
	if max_rms is not None:
		summary['num_accurate'] = int((df_ok['rms'] <= max_rms).sum())
	return summary
