from setuptools import setup, find_packages

setup(
    name='thermal_dae',
    version='0.1.0',
    description='Assembly of lumped and distributed heat-transfer networks into symbolic DAE systems',
    author='Thermal Simulation Team',
    packages=find_packages(include=['thermal_dae', 'thermal_dae.*']),
    install_requires=[
        'numpy>=1.24.0',
        'scipy>=1.10.0',
        'sympy>=1.12',
        'networkx>=3.0',
        'PyYAML>=6.0',
        'Cerberus>=1.3',
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
        'Topic :: Scientific/Engineering :: Physics',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
    ],
)
