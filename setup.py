from setuptools import setup, find_packages

setup(
    name='conic_dcp',
    version='0.1.0',
    description='Disciplined convex modeling layer with a memoized conic-form compiler',
    author='Conic DCP Team',
    packages=find_packages(include=['conic_dcp', 'conic_dcp.*']),
    install_requires=[
        'numpy>=1.24.0',
        'scipy>=1.10.0',
    ],
    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'pytest-cov>=4.0.0',
        ]
    },
    python_requires='>=3.9',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Science/Research',
        'Topic :: Scientific/Engineering :: Mathematics',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
    ],
)
