from setuptools import setup, find_packages
import re

# Read version from impotsim/__init__.py
with open('impotsim/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='impot-sim',
    version=version,
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={
        'impotsim': ['tax_rules/*.yaml'],
    },
    install_requires=[
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
        'rich>=13.0',
    ],
    extras_require={
        'mcp': [
            'mcp[cli]>=1.0.0,<2',
        ],
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'impot-sim=impotsim.cli.__main__:main',
            'impot-sim-mcp=impotsim.mcp.server:run_server',
        ],
    },
    author='Personal',
    description='Household income tax simulator (quotient familial, décote, CEHR).',
    python_requires='>=3.10',
)
