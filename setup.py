from setuptools import find_packages, setup

setup(
    name='assetpick',
    version='0.1.0',
    description='Rank GitHub release artifacts for the machine you are running on',
    package_dir={'': 'src'},
    packages=find_packages('src'),
    python_requires='>=3.10',
    install_requires=[
        'requests',
        'pick',
        'PyYAML',
        'urllib3',
        'rich',
        'platformdirs',
    ],
    extras_require={
        'test': [
            'pytest<9',
            'pytest-mock',
            'pytest-asyncio',
        ],
    },
    entry_points={
        'console_scripts': [
            'assetpick=assetpick.cli:main',
        ],
    },
)
