#!/usr/bin/env python

from setuptools import setup


setup(
    name="BrunelBench",
    version="0.1.0",
    packages=['brunelbench'],
    author="The BrunelBench team",
    description="Construction and rate analysis of the two-population Brunel benchmark network",
    long_description=open("README.rst").read(),
    license="CeCILL http://www.cecill.info",
    keywords="computational neuroscience simulation benchmark brunel network",
    classifiers=['Development Status :: 4 - Beta',
                 'Environment :: Console',
                 'Intended Audience :: Science/Research',
                 'License :: Other/Proprietary License',
                 'Natural Language :: English',
                 'Operating System :: OS Independent',
                 'Programming Language :: Python :: 3',
                 'Topic :: Scientific/Engineering'],
    install_requires=['numpy>=1.8.2', 'lazyarray>=0.3.2', 'neo>=0.5.2',
                      'quantities>=0.12.1', 'scipy'],
    extras_require={
        'MPI': ['mpi4py'],
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': ['brunelbench = brunelbench.benchmark:main'],
    },
)
