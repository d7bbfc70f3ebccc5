from setuptools import setup, find_namespace_packages

setup(
      name='regply',
      version='0.1.0',
      description='Absolute orientation registration of corresponding PLY point sets',
      packages=find_namespace_packages(include=['regply', 'regply.*']),
      install_requires=[
            'tqdm',
            'numpy',
            'pandas',
            'torch',
            'open3d'
      ],
      extras_require={
            'test': ['pytest']
      },
      entry_points={
            'console_scripts': ['regply=regply.standard.register:cli']
      },
)
