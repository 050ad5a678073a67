import setuptools

with open("README.md", "r") as fh:
	long_description = fh.read()

setuptools.setup(
	name="subvols",
	version="1.0.0",
	description="Convert mounted volumes to an @ / @snapshots subvolume layout before dependent services start.",
	long_description=long_description,
	long_description_content_type="text/markdown",
	packages=setuptools.find_packages(include=['subvols', 'subvols.*']),
	classifiers=[
		"Programming Language :: Python :: 3.12",
		"License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
		"Operating System :: POSIX :: Linux",
	],
	python_requires='>=3.12',
	install_requires=['pydantic>=2'],
	extras_require={'test': ['pytest']},
	entry_points={'console_scripts': ['subvols=subvols.main:main']},
)
