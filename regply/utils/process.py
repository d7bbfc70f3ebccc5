import math
from multiprocessing import Process


def run_parallel(num_processes, fn, tasks, params):
	"""
	Split tasks into contiguous bins and run each bin in its own process.

	Args:
		num_processes:
			Number of processes/CPUs. Processes that would get an empty bin
			are not started.
		fn:
			Module-level function called as fn(i, tasks, params), where i is
			the process index.
		tasks:
			A list of tasks.
		params:
			A dictionary of constants shared across processes.

	Returns:
		Number of processes started.
	"""
	if num_processes < 1:
		raise ValueError('Number of processes must be positive: {}'.format(num_processes))
	if len(tasks) == 0:
		return 0

	# Start parallel processes
	binsize = math.ceil(len(tasks) / num_processes)
	num_processes = math.ceil(len(tasks) / binsize)
	processes = []
	for i in range(num_processes):
		p = Process(
			target=fn,
			args=(
				i,
				tasks[binsize*i:binsize*(i+1)],
				params
			)
		)
		p.start()
		processes.append(p)

	# Wait for completion
	for p in processes:
		p.join()
	failed = [i for i, p in enumerate(processes) if p.exitcode != 0]
	if failed:
		raise RuntimeError('Worker processes {} exited abnormally'.format(failed))

	return len(processes)
