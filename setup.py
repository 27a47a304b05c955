from setuptools import find_packages, setup

setup(
  name = 'testfinder',
  packages = find_packages('src'),
  package_dir = {'': 'src'},
  version = '1.0.0',
  license = 'GNU',
  description = 'classify project files into tests, helpers and sources from glob pattern sets',
  author = 'testfinder developers',
  keywords = ['testing', 'glob', 'test discovery'],
  python_requires = '>=3.11',
  install_requires = [
    "pathspec>=0.12,<1",
    "pydantic>=2.5",
    "pydantic-settings>=2.1",
    "PyYAML>=6.0",
    "rich>=13.0",
  ],
  extras_require = {
    'test': [
      "pytest>=7.4",
      "pytest-asyncio>=0.23",
    ],
  },
  classifiers = [
    'Development Status :: 4 - Beta',
    'Intended Audience :: Developers',
    'Topic :: Software Development :: Testing',
    'License :: OSI Approved :: GNU General Public License (GPL)',
    'Programming Language :: Python :: 3',
    'Programming Language :: Python :: 3.11',
    'Programming Language :: Python :: 3.12',
  ],
)
